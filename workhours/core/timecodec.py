"""
Conversion between "H hrs M mins" strings and integer minutes.

Two parsers share one grammar. parse_strict is used for calculator inputs
and rejects minute values above 59. parse_lenient is used when summing
pasted lines and accepts any minute value as-is ("1 hrs 75 mins" -> 135).
"""
from __future__ import annotations
import logging
import math
import re
from typing import Optional

from workhours.errors import FormatError, ValidationError

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^(?:(\d+)\s*hrs?)?\s*(?:(\d+)\s*mins?)?$", re.IGNORECASE)


def _match(text: Optional[str]) -> tuple[int, int]:
    cleaned = (text or "").strip()
    m = _TIME_RE.match(cleaned)
    if not m:
        raise FormatError(
            f"Invalid time format: {text!r}. Expected 'H hrs M mins', 'H hrs' or 'M mins'"
        )
    hours = int(m.group(1)) if m.group(1) else 0
    minutes = int(m.group(2)) if m.group(2) else 0
    return hours, minutes


def parse_strict(text: Optional[str]) -> int:
    """Parse a time string, rejecting minutes outside 0-59."""
    hours, minutes = _match(text)
    if minutes > 59:
        raise FormatError(
            f"Invalid time value: {text!r}. Minutes must be between 0 and 59"
        )
    return hours * 60 + minutes


def parse_lenient(text: Optional[str]) -> int:
    """Parse a time string without range-checking the minutes."""
    hours, minutes = _match(text)
    return hours * 60 + minutes


parse_time_string = parse_strict


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_minutes(total_minutes: float) -> str:
    """Format minutes as "H hrs M mins", with a leading '-' for negative totals."""
    if isinstance(total_minutes, bool) or not isinstance(total_minutes, (int, float)) \
            or not math.isfinite(total_minutes):
        raise ValidationError(f"minutes must be a finite number, got {total_minutes!r}")
    rounded = _round_half_up(total_minutes)
    sign = "-" if rounded < 0 else ""
    hours, minutes = divmod(abs(rounded), 60)
    return f"{sign}{hours} hrs {minutes} mins"


def sum_time_strings(text: Optional[str]) -> int:
    """Sum one time string per line. Lines that do not parse are skipped."""
    total = 0
    for line in (text or "").splitlines():
        if not line.strip():
            continue
        try:
            total += parse_lenient(line)
        except FormatError:
            logger.debug("Skipping unparseable line %r", line)
    return total


def format_currency(amount: float, symbol: str = "Rs") -> str:
    return f"{symbol} {amount:.2f}"
