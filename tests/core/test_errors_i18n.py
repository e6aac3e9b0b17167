import pytest
from unittest.mock import patch
from cropverify.core.errors import (
    ConfigurationError,
    ContextUnavailable,
    DeviceUnavailable,
    NoPhotoCaptured,
    SubmissionBlocked,
    SubmissionFailed,
    VerificationError,
)
from cropverify.i18n import EN, KN, Messages


@pytest.mark.parametrize(
    "cls, fatal",
    [
        (ConfigurationError, True),
        (ContextUnavailable, True),
        (DeviceUnavailable, False),
        (NoPhotoCaptured, False),
        (SubmissionBlocked, False),
        (SubmissionFailed, False),
    ],
)
def test_fatal_kinds(cls, fatal):
    err = cls()
    assert isinstance(err, VerificationError)
    assert err.fatal is fatal
    assert err.kind == cls.__name__
    # Every kind has an English message
    assert err.message_key in EN


def test_remote_message_wins():
    t = Messages("en")
    assert SubmissionFailed("Database unavailable").localized(t) == "Database unavailable"
    assert SubmissionFailed().localized(t) == EN["errors.submissionFailed"]


def test_message_key_override():
    err = SubmissionFailed(message_key="errors.submitError")
    assert err.localized(Messages("en")) == EN["errors.submitError"]


def test_kannada_catalog_covers_every_key():
    assert set(KN) == set(EN)
    assert all(KN[k] != EN[k] for k in EN)
    assert "{count}" in KN["cameraVerification.capturedPhotos"]


def test_kannada_falls_back_to_english():
    kn = Messages("kn")
    assert kn.t("buttons.submit") != EN["buttons.submit"]
    with patch.dict(KN, clear=True):
        assert kn.t("errors.cameraDenied") == EN["errors.cameraDenied"]
    assert kn.t("no.such.key", "fallback") == "fallback"
    assert kn.t("no.such.key") == "no.such.key"


def test_params_are_interpolated():
    assert Messages("en").t("cameraVerification.capturedPhotos", count=2) == "Captured photos (2)"


def test_toggle_alternates():
    assert Messages("en").toggled().locale == "kn"
    assert Messages("kn").toggled().locale == "en"
