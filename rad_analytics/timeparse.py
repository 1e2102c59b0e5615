"""
timeparse.py — Free-form study time parsing

Study times come from hand-entered spreadsheets and PDF text layers, so the
same column can hold "9:15 AM", "09:15", "14:00" or "Signed 2:30pm".

Rules:
  - First "H:MM" / "HH:MM" anywhere in the string wins, optionally followed by
    whitespace and an AM/PM marker (case-insensitive).
  - PM and hour != 12  → hour + 12
  - AM and hour == 12  → 0
  - No marker          → hour is already 24-hour, left as is
  - Hour outside 0..23 → unparseable
  - Minute is returned as matched (60-99 are not corrected)
"""

import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from rad_analytics.errors import TimeRangeError

TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2})\s*(AM|PM)?", re.IGNORECASE)
CLOCK_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


@dataclass(frozen=True)
class ParsedTime:
    hour: int
    minute: int

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute


def parse_time(text: Any) -> Optional[ParsedTime]:
    """
    Parse a free-form time string.

    Returns ParsedTime(hour, minute) or None when no time pattern is found or
    the resulting hour is outside 0..23.
    """
    if not isinstance(text, str):
        return None
    match = TIME_PATTERN.search(text)
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2))
    period = (match.group(3) or "").upper()

    if period == "PM" and hour != 12:
        hour += 12
    if period == "AM" and hour == 12:
        hour = 0

    if hour < 0 or hour > 23:
        return None
    return ParsedTime(hour=hour, minute=minute)


def parse_clock(value: str) -> Tuple[int, int]:
    """Parse a strict "HH:MM" range bound. Raises TimeRangeError."""
    match = CLOCK_PATTERN.match(value or "")
    if not match:
        raise TimeRangeError(f"Invalid time bound {value!r}, expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise TimeRangeError(f"Time bound out of range: {value!r}")
    return hour, minute


def format_hour(hour: int) -> Tuple[str, str]:
    """Return the (24-hour, 12-hour) display labels for an hour slot."""
    hour24 = f"{hour:02d}:00"
    period = "AM" if hour < 12 else "PM"
    if hour == 0:
        h12 = 12
    elif hour > 12:
        h12 = hour - 12
    else:
        h12 = hour
    return hour24, f"{h12:02d}:00 {period}"
