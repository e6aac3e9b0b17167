import io
from datetime import datetime
import numpy as np
import pytest
from PIL import Image
from cropverify.capture.compositor import compose_evidence
from cropverify.core.errors import DeviceUnavailable, NoFrameAvailable

CAPTURED_AT = datetime(2026, 3, 7, 17, 42)


def _decode(data):
    return Image.open(io.BytesIO(data)).convert("RGB")


def test_output_is_jpeg_at_native_resolution():
    frame = np.full((480, 640, 3), 128, dtype=np.uint8)
    data = compose_evidence(frame, CAPTURED_AT)
    assert data[:2] == b"\xff\xd8"
    img = _decode(data)
    assert img.size == (640, 480)


def test_brand_plate_is_opaque_white():
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    img = _decode(compose_evidence(frame, CAPTURED_AT))
    r, g, b = img.getpixel((140, 44))
    assert min(r, g, b) > 200


def test_timestamp_banner_darkens_bottom_right():
    frame = np.full((480, 640, 3), 255, dtype=np.uint8)
    img = _decode(compose_evidence(frame, CAPTURED_AT))
    inside = img.getpixel((615, 458))
    outside = img.getpixel((320, 240))
    assert max(inside) < 150
    assert min(outside) > 240


@pytest.mark.parametrize(
    "frame",
    [
        np.zeros((480, 640), dtype=np.uint8),
        np.zeros((480, 640, 4), dtype=np.uint8),
    ],
)
def test_gray_and_bgra_frames_are_accepted(frame):
    img = _decode(compose_evidence(frame, CAPTURED_AT))
    assert img.size == (640, 480)


@pytest.mark.parametrize("frame", [None, np.zeros((0, 0, 3), dtype=np.uint8)])
def test_missing_frame_raises(frame):
    with pytest.raises(NoFrameAvailable):
        compose_evidence(frame, CAPTURED_AT)


def test_no_frame_is_a_device_error():
    assert issubclass(NoFrameAvailable, DeviceUnavailable)
