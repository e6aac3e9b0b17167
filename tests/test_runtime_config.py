import json
import pytest
from datetime import datetime
from unittest.mock import patch
from cropverify.observability.logging import log
from cropverify.settings import settings, _optional_float
from cropverify.utils.time import format_capture_timestamp


def _last_line(capsys):
    return json.loads(capsys.readouterr().out.strip().splitlines()[-1])


def test_log_redacts_owner_details(capsys):
    with patch.object(settings, "ENABLE_PII_REDACTION", True):
        log("context_resolved", fullName="Ravi Kumar", phone="9876543210", ownerId="user-9",
            extra={"mobileNumber": "+919876543210", "village": "Hosahalli"})
    out = _last_line(capsys)
    assert out["event"] == "context_resolved"
    assert out["fullName"] == "[REDACTED:10chars]"
    assert out["phone"] == "[REDACTED:10chars]"
    assert out["ownerId"] == "user-9"
    assert out["extra"]["mobileNumber"] == "[REDACTED:13chars]"
    assert out["extra"]["village"] == "Hosahalli"


def test_log_passthrough_when_redaction_disabled(capsys):
    with patch.object(settings, "ENABLE_PII_REDACTION", False):
        log("context_resolved", phone="9876543210")
    assert _last_line(capsys)["phone"] == "9876543210"


def test_optional_float(monkeypatch):
    monkeypatch.setenv("DEVICE_LAT", " 12.5 ")
    assert _optional_float("DEVICE_LAT") == 12.5
    monkeypatch.setenv("DEVICE_LAT", "")
    assert _optional_float("DEVICE_LAT") is None


def test_defaults():
    assert settings.MAX_PHOTOS >= 1
    assert settings.LOOKUP_STRATEGY in ("crop_id", "user_crop")
    assert settings.VERIFICATION_API_URL.endswith("/verifications/submit")


@pytest.mark.parametrize(
    "dt, expected",
    [
        (datetime(2026, 3, 7, 17, 42), "07 Mar 2026, 05:42 pm"),
        (datetime(2025, 12, 31, 0, 5), "31 Dec 2025, 12:05 am"),
        (datetime(2025, 1, 1, 12, 0), "01 Jan 2025, 12:00 pm"),
    ],
)
def test_capture_timestamp_format(dt, expected):
    assert format_capture_timestamp(dt) == expected
