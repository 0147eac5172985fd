"""
Owned state container for the query collection.

Holds the most recently fetched query snapshot plus the local changes
applied to it. Only QueryLifecycleManager writes to it; everything else
reads the `queries` tuple.
"""

from collections.abc import Iterable
from typing import Any

import structlog

from insurai_engine.domain.enums import QueryStatus
from insurai_engine.domain.errors import QueryNotFoundError
from insurai_engine.domain.records import QueryRecord


logger = structlog.get_logger()


class QueryStore:
    """
    Query collection owned by one lifecycle manager.

    The generation counter changes whenever the collection is swapped for a
    fresh snapshot or the owning screen is torn down. A confirmation that
    started under an older generation must not touch the store.

    `queries` is an immutable tuple rebuilt on every change, so derived
    statistics keyed by its identity are never stale.
    """

    def __init__(self, queries: Iterable[QueryRecord] = ()):
        self._records: dict[Any, QueryRecord] = {}
        self._generation = 0
        self._closed = False
        self._load(queries)

    def _load(self, queries: Iterable[QueryRecord]) -> None:
        self._records = {}
        for query in queries:
            # First occurrence of an id wins, as in the source listing
            self._records.setdefault(query.id, query)
        self._snapshot = tuple(self._records.values())

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def queries(self) -> tuple[QueryRecord, ...]:
        return self._snapshot

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, query_id: Any) -> bool:
        return query_id in self._records

    def get(self, query_id: Any) -> QueryRecord:
        """
        Current record for an id.

        Raises:
            QueryNotFoundError: If the id is not in the snapshot
        """
        try:
            return self._records[query_id]
        except KeyError:
            raise QueryNotFoundError(
                f"Query {query_id} not found",
                details={"query_id": query_id},
            ) from None

    def ids_with_status(self, status: QueryStatus) -> list[Any]:
        """Ids of queries currently in the given status, in collection order."""
        return [q.id for q in self._snapshot if q.status == status]

    def apply(self, record: QueryRecord) -> None:
        """
        Replace the stored record with the same id.

        Raises:
            QueryNotFoundError: If the id is not in the snapshot
        """
        if record.id not in self._records:
            raise QueryNotFoundError(
                f"Query {record.id} not found",
                details={"query_id": record.id},
            )
        self._records[record.id] = record
        self._snapshot = tuple(self._records.values())

    def replace_snapshot(self, queries: Iterable[QueryRecord]) -> None:
        """Swap in a freshly fetched collection; in-flight results become stale."""
        self._load(queries)
        self._generation += 1
        logger.debug("query_snapshot_replaced", queries=len(self._records), generation=self._generation)

    def close(self) -> None:
        """Tear down: pending confirmations will be ignored."""
        self._closed = True
        self._generation += 1
        logger.debug("query_store_closed", generation=self._generation)
