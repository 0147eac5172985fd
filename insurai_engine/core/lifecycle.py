"""
Support query response lifecycle.

State machine per query:

    Pending --submit_response--> Resolved --begin_edit--> Resolved/editing
                                    ^                            |
                                    +--------commit_edit---------+

Pending text is a free local draft (edit_response_text). Submissions and
committed edits are optimistic: the local record changes at once, the
remote system is asked to confirm, and a failed confirmation restores the
saved pre-image. An edited Resolved query is never reopened to Pending.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, runtime_checkable

from insurai_engine.config.models import LifecycleConfig
from insurai_engine.core.state import QueryStore
from insurai_engine.domain.enums import QueryStatus
from insurai_engine.domain.errors import (
    AuthenticationMissing,
    InvalidTransitionError,
    RemoteConfirmationError,
    ValidationError,
)
from insurai_engine.domain.records import QueryRecord
from insurai_engine.utils.logging import LifecycleLogger
from insurai_engine.utils.parsing import is_blank


@runtime_checkable
class QueryConfirmer(Protocol):
    """Remote system of record for query responses."""

    async def respond_to_query(self, query_id: Any, response: str) -> Any:
        """Persist a response. Raises on failure."""
        ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QueryLifecycleManager:
    """
    Single writer for a QueryStore.

    Mutations of one query are serialized by a per-id lock that is held
    from the optimistic apply until the confirmation settles; confirmations
    for different ids run concurrently. Local-only operations on a query
    whose confirmation is still in flight are rejected.

    Usage:
        manager = QueryLifecycleManager(store, client)
        manager.edit_response_text(9, "Approved")
        await manager.submit_response(9, "Approved")
    """

    def __init__(
        self,
        store: QueryStore,
        confirmer: QueryConfirmer,
        config: Optional[LifecycleConfig] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.store = store
        self.confirmer = confirmer
        self.config = config or LifecycleConfig()
        self.clock = clock
        self._locks: dict[Any, asyncio.Lock] = {}
        self._lock_users: dict[Any, int] = {}
        self.log = LifecycleLogger(component="queries")

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _serialized(self, query_id: Any) -> AsyncIterator[None]:
        """Hold the query's lock; the entry is dropped once no task holds or awaits it."""
        lock = self._locks.get(query_id)
        if lock is None:
            lock = self._locks[query_id] = asyncio.Lock()
        self._lock_users[query_id] = self._lock_users.get(query_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[query_id] -= 1
            if not self._lock_users[query_id]:
                del self._lock_users[query_id]
                del self._locks[query_id]

    def is_busy(self, query_id: Any) -> bool:
        """True while a confirmation for this query is in flight."""
        lock = self._locks.get(query_id)
        return lock is not None and lock.locked()

    def _ensure_open(self) -> None:
        if self.store.closed:
            raise InvalidTransitionError("Query store is closed")

    def _ensure_idle(self, query_id: Any, action: str) -> None:
        if self.is_busy(query_id):
            raise InvalidTransitionError(
                f"Cannot {action} query {query_id} while a confirmation is in flight",
                details={"query_id": query_id, "action": action},
            )

    @staticmethod
    def _require_text(query_id: Any, text: Optional[str]) -> str:
        if is_blank(text):
            raise ValidationError(
                "Response text must not be empty",
                details={"query_id": query_id},
            )
        return text

    # ------------------------------------------------------------------
    # Local-only operations
    # ------------------------------------------------------------------

    def edit_response_text(self, query_id: Any, text: str) -> QueryRecord:
        """
        Update the local response buffer.

        Allowed while Pending or while editing a Resolved query. Never
        contacts the remote system and never changes status.

        Raises:
            QueryNotFoundError: Unknown id
            InvalidTransitionError: Resolved and not editing, or busy
        """
        self._ensure_open()
        current = self.store.get(query_id)
        self._ensure_idle(query_id, "edit")

        if current.status == QueryStatus.RESOLVED and not current.is_editing:
            raise InvalidTransitionError(
                f"Query {query_id} is resolved; begin an edit first",
                details={"query_id": query_id},
            )

        updated = current.model_copy(update={"response": text or ""})
        self.store.apply(updated)
        return updated

    def begin_edit(self, query_id: Any) -> QueryRecord:
        """
        Resolved -> Resolved/editing.

        Raises:
            QueryNotFoundError: Unknown id
            InvalidTransitionError: Not Resolved, or busy
        """
        self._ensure_open()
        current = self.store.get(query_id)
        self._ensure_idle(query_id, "edit")

        if current.status != QueryStatus.RESOLVED:
            raise InvalidTransitionError(
                f"Only resolved queries can be edited (query {query_id} is {current.status.value})",
                details={"query_id": query_id, "status": current.status.value},
            )
        if current.is_editing:
            return current

        updated = current.model_copy(update={"is_editing": True})
        self.store.apply(updated)
        return updated

    # ------------------------------------------------------------------
    # Confirmed transitions
    # ------------------------------------------------------------------

    async def submit_response(self, query_id: Any, text: str) -> Optional[QueryRecord]:
        """
        Pending -> Resolved with the given response.

        Returns:
            The confirmed record, or None if the store moved on (snapshot
            replaced or torn down) before the confirmation arrived

        Raises:
            ValidationError: Empty text; nothing changes, nothing is sent
            InvalidTransitionError: Query is not Pending
            RemoteConfirmationError: Confirmation failed; already rolled back
            AuthenticationMissing: No credential; already rolled back
        """
        text = self._require_text(query_id, text)
        self._ensure_open()

        async with self._serialized(query_id):
            self._ensure_open()
            current = self.store.get(query_id)
            if current.status != QueryStatus.PENDING:
                raise InvalidTransitionError(
                    f"Query {query_id} is already resolved",
                    details={"query_id": query_id},
                )
            now = self.clock().isoformat()
            staged = current.model_copy(
                update={
                    "response": text,
                    "status": QueryStatus.RESOLVED,
                    "is_editing": False,
                    "updated_at": now,
                    "resolved_at": now,
                }
            )
            return await self._stage_and_confirm(current, staged, "submit")

    async def commit_edit(self, query_id: Any, text: str) -> Optional[QueryRecord]:
        """
        Resolved/editing -> Resolved with the edited response.

        Raises:
            ValidationError: Empty text; nothing changes, nothing is sent
            InvalidTransitionError: Query is not being edited
            RemoteConfirmationError: Confirmation failed; already rolled back
            AuthenticationMissing: No credential; already rolled back
        """
        text = self._require_text(query_id, text)
        self._ensure_open()

        async with self._serialized(query_id):
            self._ensure_open()
            current = self.store.get(query_id)
            if current.status != QueryStatus.RESOLVED or not current.is_editing:
                raise InvalidTransitionError(
                    f"Query {query_id} is not being edited",
                    details={"query_id": query_id},
                )
            staged = current.model_copy(
                update={
                    "response": text,
                    "is_editing": False,
                    "updated_at": self.clock().isoformat(),
                }
            )
            return await self._stage_and_confirm(current, staged, "commit_edit")

    async def _stage_and_confirm(
        self,
        pre_image: QueryRecord,
        staged: QueryRecord,
        action: str,
    ) -> Optional[QueryRecord]:
        """Apply locally, await confirmation, then keep or restore the pre-image."""
        generation = self.store.generation
        self.store.apply(staged)
        self.log.staged(staged.id, action, generation=generation)

        try:
            await self._confirm(staged)
        except asyncio.CancelledError:
            if self.store.generation == generation:
                self.store.apply(pre_image)
                self.log.rolled_back(staged.id, action, error="cancelled")
            raise
        except Exception as exc:
            if self.store.generation != generation:
                self.log.discarded(staged.id, action, outcome="failed", error=str(exc))
                return None
            self.store.apply(pre_image)
            self.log.rolled_back(staged.id, action, error=str(exc))
            if isinstance(exc, AuthenticationMissing):
                raise
            raise RemoteConfirmationError(
                f"Could not confirm {action} for query {staged.id}",
                record_id=staged.id,
                details={"action": action, "cause": str(exc) or type(exc).__name__},
            ) from exc

        if self.store.generation != generation:
            self.log.discarded(staged.id, action, outcome="confirmed")
            return None

        self.log.confirmed(staged.id, action)
        return staged

    async def _confirm(self, staged: QueryRecord) -> None:
        call = self.confirmer.respond_to_query(staged.id, staged.response)
        timeout = self.config.confirm_timeout_seconds
        if timeout is None:
            await call
        else:
            await asyncio.wait_for(call, timeout)
