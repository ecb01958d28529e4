"""
Time and time-range formatting.

Slot ranges are shown in 12-hour form ("2:00 PM - 2:45 PM"), while older
booking records may hold 24-hour ranges ("14:00 - 16:00"). Every parser
here accepts both forms; the form is told apart by the AM/PM suffix.
"""

import re
from datetime import time
from typing import Tuple

from loguru import logger

from courtbook.exceptions import TimeFormatError

MINUTES_PER_DAY = 24 * 60

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*(AM|PM)?\s*$", re.IGNORECASE)


def _has_meridiem(value: str) -> bool:
    upper = value.upper()
    return "AM" in upper or "PM" in upper


def _split_range(range_string: str) -> Tuple[str, str]:
    parts = [part.strip() for part in range_string.split("-")]
    if len(parts) != 2 or not all(parts):
        raise TimeFormatError(f"Not a time range: {range_string!r}")
    return parts[0], parts[1]


def parse_clock(value: str) -> time:
    """
    Parse a single clock time such as "6:45", "14:00" or "2:00 PM".

    Raises:
        TimeFormatError: if the value is not a valid time
    """
    match = _CLOCK_RE.match(value)
    if not match:
        raise TimeFormatError(f"Not a clock time: {value!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    meridiem = match.group(3)

    if meridiem:
        if not 1 <= hours <= 12:
            raise TimeFormatError(f"Hour out of range for 12-hour time: {value!r}")
        if meridiem.upper() == "PM" and hours != 12:
            hours += 12
        elif meridiem.upper() == "AM" and hours == 12:
            hours = 0

    if hours > 23 or minutes > 59:
        raise TimeFormatError(f"Clock time out of range: {value!r}")
    return time(hours, minutes)


def _to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def parse_start_minutes(range_or_time: str) -> int:
    """
    Minutes since midnight of a bare time, or of the start of a range.
    """
    start = range_or_time.split("-")[0]
    return _to_minutes(parse_clock(start))


def parse_end_minutes(range_or_time: str) -> int:
    """
    Minutes since midnight of the end of a range.

    A bare time is its own end. An end at or before the start is taken to
    run past midnight and is reported as more than 1440.
    """
    if "-" not in range_or_time:
        return parse_start_minutes(range_or_time)
    _, end = parse_time_range(range_or_time)
    return end


def parse_time_range(range_string: str) -> Tuple[int, int]:
    """
    Parse a range into (start, end) minutes since midnight.

    Example:
        >>> parse_time_range("11:30 PM - 12:15 AM")
        (1410, 1455)
    """
    start_text, end_text = _split_range(range_string)
    start = _to_minutes(parse_clock(start_text))
    end = _to_minutes(parse_clock(end_text))
    if end <= start:
        end += MINUTES_PER_DAY
    return start, end


def format_time(value: time) -> str:
    """Render a time as 'h:mm AM/PM' without a leading zero."""
    meridiem = "PM" if value.hour >= 12 else "AM"
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {meridiem}"


def format_range(start: time, end: time) -> str:
    return f"{format_time(start)} - {format_time(end)}"


def to_12_hour(range_string: str) -> str:
    """
    Convert a 24-hour range to 12-hour display form.

    Ranges already carrying AM/PM are returned unchanged, so the
    conversion is idempotent. Input that cannot be parsed is also
    returned unchanged.
    """
    if _has_meridiem(range_string):
        return range_string

    try:
        start_text, end_text = _split_range(range_string)
        return format_range(parse_clock(start_text), parse_clock(end_text))
    except TimeFormatError as e:
        logger.warning(f"Cannot convert time range to 12-hour form: {e}")
        return range_string
