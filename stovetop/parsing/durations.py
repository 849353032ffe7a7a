"""Time-phrase parsing and time formatting helpers."""

import math
import re
from typing import Optional


_UNIT = r"(hours?|hrs?|minutes?|mins?|seconds?|secs?)\b"

_NUMBER = r"(\d+(?:\.\d+)?)"

RANGE_PATTERN = re.compile(_NUMBER + r"\s*[–—\-]\s*" + _NUMBER + r"\s*" + _UNIT, re.IGNORECASE)
SINGLE_PATTERN = re.compile(_NUMBER + r"\s*" + _UNIT, re.IGNORECASE)


def _unit_seconds(unit: str) -> int:
    unit = unit.lower()
    if unit.startswith(("hour", "hr")):
        return 3600
    if unit.startswith("min"):
        return 60
    return 1


def extract_duration(text: str) -> Optional[int]:
    """Extract a timer length in seconds from free text.

    Ranges ("10–12 mins") resolve to their whole-number average; otherwise the
    first single phrase ("10 min", "30 seconds", "1.5 hours") is used.
    Fractional amounts are rounded up to the next second.

    Args:
        text: Step instruction.

    Returns:
        Seconds, or None if the text carries no time phrase.
    """
    match = RANGE_PATTERN.search(text)
    if match:
        low, high, unit = float(match.group(1)), float(match.group(2)), match.group(3)
        return math.ceil((low + high) // 2 * _unit_seconds(unit))

    match = SINGLE_PATTERN.search(text)
    if match:
        return math.ceil(float(match.group(1)) * _unit_seconds(match.group(2)))

    return None


def format_time(seconds: int) -> str:
    """Compact display form: "45 sec", "5 min", "2 min 30 sec"."""
    if seconds < 60:
        return f"{seconds} sec"
    minutes, secs = divmod(seconds, 60)
    if secs == 0:
        return f"{minutes} min"
    return f"{minutes} min {secs} sec"


def format_spoken_duration(seconds: int) -> str:
    """Spoken form used in voice announcements: "1 minute 30 seconds"."""
    minutes, secs = divmod(seconds, 60)
    if minutes == 0:
        return f"{secs} seconds"
    minute_part = "1 minute" if minutes == 1 else f"{minutes} minutes"
    if secs == 0:
        return minute_part
    second_part = "1 second" if secs == 1 else f"{secs} seconds"
    return f"{minute_part} {second_part}"


def format_clock(seconds: int) -> str:
    """Timer face: "MM:SS"."""
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes:02d}:{secs:02d}"
