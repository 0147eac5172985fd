"""
Broadcast responses.

Stages one draft on every Pending query, and optionally confirms every
staged draft in bulk. Both go through QueryLifecycleManager.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import structlog

from insurai_engine.core.lifecycle import QueryLifecycleManager
from insurai_engine.domain.enums import QueryStatus
from insurai_engine.domain.errors import EngineError
from insurai_engine.utils.parsing import is_blank


logger = structlog.get_logger()


@dataclass
class BulkConfirmResult:
    """Outcome of confirming all staged drafts."""

    confirmed: list[Any] = field(default_factory=list)
    failed: dict[Any, EngineError] = field(default_factory=dict)
    discarded: list[Any] = field(default_factory=list)

    @property
    def all_confirmed(self) -> bool:
        return not self.failed and not self.discarded


class BroadcastResponder:
    """
    Applies one draft to every Pending query.

    Usage:
        responder = BroadcastResponder(manager)
        staged = responder.broadcast("We are reviewing your claim.")
        result = await responder.confirm_all()
    """

    def __init__(self, manager: QueryLifecycleManager):
        self.manager = manager

    def broadcast(self, draft_text: str) -> int:
        """
        Stage a draft on every Pending query.

        Runs without suspending, so no other mutation can interleave. Does
        not submit anything.

        Args:
            draft_text: Response draft

        Returns:
            Number of queries staged; 0 for an empty or whitespace draft
        """
        if is_blank(draft_text):
            return 0

        pending_ids = self.manager.store.ids_with_status(QueryStatus.PENDING)
        for query_id in pending_ids:
            self.manager.edit_response_text(query_id, draft_text)

        logger.info("draft_broadcast", staged=len(pending_ids))
        return len(pending_ids)

    async def confirm_all(self) -> BulkConfirmResult:
        """
        Submit every Pending query that holds a non-empty draft.

        Confirmations run concurrently; each failure rolls back only its
        own query.

        Returns:
            Confirmed, failed and discarded ids
        """
        drafts = [q for q in self.manager.store.queries if q.has_draft]
        outcomes = await asyncio.gather(
            *(self.manager.submit_response(q.id, q.response) for q in drafts),
            return_exceptions=True,
        )

        result = BulkConfirmResult()
        for query, outcome in zip(drafts, outcomes):
            if isinstance(outcome, EngineError):
                result.failed[query.id] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome is None:
                result.discarded.append(query.id)
            else:
                result.confirmed.append(query.id)

        logger.info(
            "drafts_confirmed",
            confirmed=len(result.confirmed),
            failed=len(result.failed),
            discarded=len(result.discarded),
        )
        return result
