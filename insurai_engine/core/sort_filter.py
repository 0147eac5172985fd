"""
Sorting and filtering over enriched collections.

The comparator is chosen by the field's semantic type: numeric fields
compare as floats, date-like fields as timestamps, everything else as
case-insensitive text. Sorting is stable.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, TypeVar

from pydantic.alias_generators import to_camel

from insurai_engine.config.models import SortFilterConfig
from insurai_engine.domain.enums import SortDirection, StatusFilter
from insurai_engine.domain.records import record_value
from insurai_engine.utils.parsing import parse_amount, parse_timestamp


T = TypeVar("T")


@dataclass(frozen=True)
class SortState:
    """
    Active sort key and direction.

    Selecting the active key again flips the direction; selecting a
    different key starts ascending.
    """

    key: Optional[str] = None
    direction: SortDirection = SortDirection.ASC

    def select(self, key: str) -> "SortState":
        if key == self.key and self.direction == SortDirection.ASC:
            return SortState(key, SortDirection.DESC)
        return SortState(key, SortDirection.ASC)


class SortFilterEngine:
    """
    Type-aware sorting and predicate filtering.

    Usage:
        engine = SortFilterEngine()
        state = SortState().select("amount")
        rows = engine.sort(claims, state.key, state.direction)
        rows = engine.filter(rows, ClaimFilter("asha", StatusFilter.PENDING))
    """

    def __init__(self, config: Optional[SortFilterConfig] = None):
        self.config = config or SortFilterConfig()
        self._numeric = set(self.config.numeric_fields)
        self._dates = set(self.config.date_fields)

    def sort_key(self, key: str) -> Callable[[Any], Any]:
        """Key function for the field's semantic type."""
        # Configured field lists use wire names; attribute names map onto them
        wire_key = key if key in self._numeric or key in self._dates else to_camel(key)

        if wire_key in self._numeric:
            return lambda item: parse_amount(record_value(item, key))

        if wire_key in self._dates:
            def timestamp_key(item: Any) -> float:
                moment = parse_timestamp(record_value(item, key))
                # Invalid dates sort before every valid one
                return moment.timestamp() if moment is not None else float("-inf")

            return timestamp_key

        def text_key(item: Any) -> str:
            value = record_value(item, key)
            if isinstance(value, Enum):
                value = value.value
            return "" if value is None else str(value).lower()

        return text_key

    def sort(
        self,
        items: Iterable[T],
        key: Optional[str],
        direction: SortDirection | str = SortDirection.ASC,
    ) -> list[T]:
        """
        Sort items by a field.

        Args:
            items: Records or mappings
            key: Field name (attribute or wire name); None keeps input order
            direction: asc or desc

        Returns:
            New list; records that compare equal keep their input order in
            both directions
        """
        if key is None:
            return list(items)
        descending = SortDirection(direction) == SortDirection.DESC
        return sorted(items, key=self.sort_key(key), reverse=descending)

    def filter(self, items: Iterable[T], predicate: Callable[[T], bool]) -> list[T]:
        """Items satisfying the predicate, in input order."""
        return [item for item in items if predicate(item)]

    def claim_filter(
        self,
        search: str = "",
        status: StatusFilter | str = StatusFilter.ALL,
    ) -> "ClaimFilter":
        """Claim predicate searching the configured fields."""
        return ClaimFilter(search, status, tuple(self.config.search_fields))

    def view(
        self,
        items: Sequence[T],
        search: str = "",
        status: StatusFilter | str = StatusFilter.ALL,
        sort_state: Optional[SortState] = None,
    ) -> list[T]:
        """Filter then sort, as the list screens present a collection."""
        rows = self.filter(items, self.claim_filter(search, status))
        state = sort_state or SortState()
        return self.sort(rows, state.key, state.direction)


def matches_status(record: Any, status: StatusFilter | str) -> bool:
    """
    Categorical status filter.

    All matches everything, Pending matches Pending only, Resolved matches
    anything that is not Pending.
    """
    status = StatusFilter(status)
    if status == StatusFilter.ALL:
        return True
    value = record_value(record, "status")
    if isinstance(value, Enum):
        value = value.value
    if status == StatusFilter.PENDING:
        return value == StatusFilter.PENDING.value
    return value != StatusFilter.PENDING.value


class ClaimFilter:
    """
    Free-text search AND status filter.

    The search is a case-insensitive substring match against any of the
    search fields; an empty search matches everything.
    """

    DEFAULT_FIELDS = tuple(SortFilterConfig().search_fields)

    def __init__(
        self,
        search: str = "",
        status: StatusFilter | str = StatusFilter.ALL,
        fields: Optional[Sequence[str]] = None,
    ):
        self.search = (search or "").lower()
        self.status = StatusFilter(status)
        self.fields = tuple(fields) if fields is not None else self.DEFAULT_FIELDS

    def matches_search(self, record: Any) -> bool:
        if not self.search:
            return True
        for name in self.fields:
            value = record_value(record, name)
            if value is not None and self.search in str(value).lower():
                return True
        return False

    def __call__(self, record: Any) -> bool:
        return self.matches_search(record) and matches_status(record, self.status)
