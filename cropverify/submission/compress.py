"""
Image size reduction, delegated to Pillow.

Budget: longest side <= max_dimension, encoded size <= max_size_mb. The
encoder quality steps down first; if the floor is reached and the file is
still too large, the image is scaled down and the quality ladder restarts.
"""

import io
from typing import Optional

from PIL import Image

from cropverify.settings import settings

_QUALITY_START = 90
_QUALITY_FLOOR = 40
_QUALITY_STEP = 10
_SCALE_STEP = 0.8
_MIN_DIMENSION = 64


def _encode(img: Image.Image, quality: int) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality, optimize=True)
    return buf.getvalue()


def compress_image(data: bytes, *, max_size_mb: Optional[float] = None, max_dimension: Optional[int] = None) -> bytes:
    """Decode an encoded still and return a JPEG within the budget. Raises OSError if the bytes are not an image."""
    max_bytes = int((max_size_mb or settings.COMPRESS_MAX_SIZE_MB) * 1024 * 1024)
    max_dimension = int(max_dimension or settings.COMPRESS_MAX_DIMENSION)

    with Image.open(io.BytesIO(data)) as src:
        img = src.convert("RGB")
    img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

    while True:
        quality = _QUALITY_START
        out = _encode(img, quality)
        while len(out) > max_bytes and quality > _QUALITY_FLOOR:
            quality -= _QUALITY_STEP
            out = _encode(img, quality)
        if len(out) <= max_bytes or max(img.size) <= _MIN_DIMENSION:
            return out
        img = img.resize(
            (max(1, int(img.width * _SCALE_STEP)), max(1, int(img.height * _SCALE_STEP))),
            Image.Resampling.LANCZOS,
        )
