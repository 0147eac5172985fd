"""
Lenient value parsing for transport payloads.

Amounts and timestamps arrive as whatever the record sources emit. These
helpers never raise: unparsable input maps to a defined fallback.
"""

import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from dateutil import parser as date_parser


# Leading decimal literal, the way a lenient float parser reads "1200.50 INR"
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def parse_amount(value: Any) -> float:
    """
    Parse a monetary amount.

    Args:
        value: String, int, float or Decimal amount

    Returns:
        Finite float; 0.0 for anything unparsable
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float, Decimal)):
        result = float(value)
        return result if math.isfinite(result) else 0.0

    if not isinstance(value, str):
        return 0.0

    match = _NUMBER_PREFIX.match(value)
    if match is None:
        return 0.0

    try:
        result = float(Decimal(match.group(1)))
    except (InvalidOperation, OverflowError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a timestamp into a naive UTC datetime.

    Numbers are epoch milliseconds. Timezone-aware values are converted to
    UTC and made naive so every parsed value is mutually comparable.

    Args:
        value: ISO string, datetime, date or epoch milliseconds

    Returns:
        Parsed datetime, or None if the value is missing or invalid
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            parsed = date_parser.parse(value)
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def weekday_label(moment: datetime) -> str:
    """Short weekday name (Mon..Sun)."""
    return WEEKDAY_LABELS[moment.weekday()]


def month_label(moment: datetime) -> str:
    """Calendar month label, e.g. 'Jan 2025'."""
    return moment.strftime("%b %Y")


def is_blank(text: str | None) -> bool:
    """True for None, empty or whitespace-only text."""
    return text is None or not str(text).strip()
