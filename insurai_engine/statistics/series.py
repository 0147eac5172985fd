"""
Time-bucketed series.

Records whose timestamp does not parse are left out of the buckets; the
caller still counts them in its totals.
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from insurai_engine.utils.parsing import (
    WEEKDAY_LABELS,
    month_label,
    parse_timestamp,
    weekday_label,
)


def bucket_by_weekday(timestamps: Iterable[Any]) -> tuple[dict[str, int], int]:
    """
    Count timestamps per weekday.

    Args:
        timestamps: Raw timestamp values

    Returns:
        (counts for every weekday Mon..Sun, number of unparsable values)
    """
    counts = {label: 0 for label in WEEKDAY_LABELS}
    skipped = 0
    for raw in timestamps:
        moment = parse_timestamp(raw)
        if moment is None:
            skipped += 1
            continue
        counts[weekday_label(moment)] += 1
    return counts, skipped


def bucket_by_month(
    items: Iterable[Any],
    timestamp_of: Callable[[Any], Any],
    value_of: Callable[[Any], float],
) -> tuple[dict[str, float], int]:
    """
    Sum values per calendar month.

    Args:
        items: Records to bucket
        timestamp_of: Extracts the raw timestamp from a record
        value_of: Extracts the value to add from a record

    Returns:
        (chronologically ordered "Mon YYYY" -> sum, number of unparsable values)
    """
    sums: dict[tuple[int, int], float] = {}
    skipped = 0
    for item in items:
        moment = parse_timestamp(timestamp_of(item))
        if moment is None:
            skipped += 1
            continue
        key = (moment.year, moment.month)
        sums[key] = sums.get(key, 0.0) + value_of(item)

    return {
        month_label(datetime(year, month, 1)): total
        for (year, month), total in sorted(sums.items())
    }, skipped
