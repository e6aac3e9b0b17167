import time
from datetime import datetime

# Fixed month abbreviations so the burned-in timestamp never depends on the host locale
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def now_ms() -> int:
    return int(time.time() * 1000)


def format_capture_timestamp(dt: datetime) -> str:
    """
    Render a capture time the way an en-IN locale prints
    day=2-digit, month=short, year=numeric, hour=2-digit, minute=2-digit:
    "07 Mar 2026, 05:42 pm".
    """
    hour12 = dt.hour % 12 or 12
    meridiem = "am" if dt.hour < 12 else "pm"
    return f"{dt.day:02d} {_MONTHS[dt.month - 1]} {dt.year}, {hour12:02d}:{dt.minute:02d} {meridiem}"
