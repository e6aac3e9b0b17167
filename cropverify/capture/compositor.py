"""
Evidence Compositor
-------------------
Freezes a live frame into a JPEG still and burns in two overlays:

1) the brand label, opaque, top-left: "mark" (gray) + "het." (green)
2) the capture time on a semi-transparent black banner, bottom-right

Synchronous on purpose: capture -> compose -> append happens inside one user action.
"""

from __future__ import annotations

import io
from datetime import datetime
from typing import Optional

import cv2
import numpy as np
from PIL import Image, ImageDraw, ImageFont

from cropverify.core.errors import NoFrameAvailable
from cropverify.settings import settings
from cropverify.utils.time import format_capture_timestamp

BRAND_PLATE = (10, 10, 150, 50)
BRAND_PLATE_FILL = (255, 255, 255, 255)
BRAND_GRAY = (55, 65, 81, 255)     # #374151
BRAND_GREEN = (22, 163, 74, 255)   # #16a34a
BRAND_FONT_SIZE = 24

BANNER_WIDTH = 190
BANNER_HEIGHT = 25
BANNER_MARGIN = 10
BANNER_FILL = (0, 0, 0, 153)       # 60% black
BANNER_TEXT = (255, 255, 255, 255)
BANNER_FONT_SIZE = 12


def _font(size: int, bold: bool = False):
    try:
        return ImageFont.truetype("DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf", size)
    except OSError:
        return ImageFont.load_default(size=size)


def _draw_brand(draw: ImageDraw.ImageDraw) -> None:
    draw.rectangle(BRAND_PLATE, fill=BRAND_PLATE_FILL)
    font = _font(BRAND_FONT_SIZE, bold=True)
    y = BRAND_PLATE[1] + 6
    draw.text((20, y), "mark", font=font, fill=BRAND_GRAY)
    draw.text((80, y), "het", font=font, fill=BRAND_GREEN)
    draw.text((120, y), ".", font=font, fill=BRAND_GREEN)


def _draw_timestamp(draw: ImageDraw.ImageDraw, width: int, height: int, captured_at: datetime) -> None:
    x0 = width - BANNER_MARGIN - BANNER_WIDTH
    y0 = height - BANNER_MARGIN - BANNER_HEIGHT
    draw.rectangle((x0, y0, width - BANNER_MARGIN, height - BANNER_MARGIN), fill=BANNER_FILL)
    draw.text((x0 + 5, y0 + 6), format_capture_timestamp(captured_at), font=_font(BANNER_FONT_SIZE), fill=BANNER_TEXT)


def compose_evidence(frame: Optional[np.ndarray], captured_at: datetime, quality: Optional[int] = None) -> bytes:
    """Return a JPEG of the frame at its native resolution with both overlays applied."""
    if frame is None or frame.size == 0 or frame.shape[0] == 0 or frame.shape[1] == 0:
        # Device is open but not warmed up yet
        raise NoFrameAvailable()

    height, width = frame.shape[:2]
    if frame.ndim == 2:
        rgb = cv2.cvtColor(frame, cv2.COLOR_GRAY2RGB)
    elif frame.shape[2] == 4:
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGRA2RGB)
    else:
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
    base = Image.fromarray(rgb).convert("RGBA")

    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    _draw_brand(draw)
    _draw_timestamp(draw, width, height, captured_at)

    still = Image.alpha_composite(base, overlay).convert("RGB")
    buf = io.BytesIO()
    still.save(buf, format="JPEG", quality=int(quality or settings.JPEG_QUALITY))
    return buf.getvalue()
