"""
Agent availability with optimistic toggling.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

import structlog

from insurai_engine.domain.errors import (
    AuthenticationMissing,
    RemoteConfirmationError,
    ValidationError,
)
from insurai_engine.domain.records import AvailabilityRecord, RecordId
from insurai_engine.utils.logging import LifecycleLogger
from insurai_engine.utils.parsing import parse_timestamp


logger = structlog.get_logger()


class AvailabilityBackend(Protocol):
    """Remote availability endpoints."""

    async def post_availability(
        self,
        agent_id: RecordId,
        available: bool,
        start_time: Optional[str],
        end_time: Optional[str],
    ) -> Any:
        ...

    async def get_availability(self, agent_id: RecordId) -> Optional[AvailabilityRecord]:
        ...


class AvailabilityManager:
    """
    Tracks one agent's availability flag.

    toggle() flips the flag locally before the server confirms and restores
    it if the post fails. After a successful post the server's view is
    read back and adopted.
    """

    def __init__(
        self,
        agent_id: RecordId,
        backend: AvailabilityBackend,
        available: bool = False,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.agent_id = agent_id
        self.backend = backend
        self.clock = clock
        self._available = available
        self._lock = asyncio.Lock()
        self.log = LifecycleLogger(component="availability").bind(agent_id=agent_id)

    @property
    def available(self) -> bool:
        return self._available

    async def refresh(self) -> bool:
        """Adopt the server's current flag."""
        record = await self.backend.get_availability(self.agent_id)
        if record is not None:
            self._available = record.available
        return self._available

    async def toggle(self) -> bool:
        """
        Flip availability, effective now and open-ended.

        Returns:
            The flag after confirmation

        Raises:
            RemoteConfirmationError: Post failed; flag restored
            AuthenticationMissing: No credential; flag restored
        """
        async with self._lock:
            previous = self._available
            self._available = not previous
            self.log.staged(self.agent_id, "toggle", available=self._available)

            try:
                await self.backend.post_availability(
                    self.agent_id,
                    self._available,
                    self.clock().isoformat(),
                    None,
                )
            except Exception as exc:
                self._available = previous
                self.log.rolled_back(self.agent_id, "toggle", error=str(exc))
                if isinstance(exc, AuthenticationMissing):
                    raise
                raise RemoteConfirmationError(
                    "Could not update availability",
                    record_id=self.agent_id,
                    details={"cause": str(exc) or type(exc).__name__},
                ) from exc

            self.log.confirmed(self.agent_id, "toggle", available=self._available)
            await self._read_back()
            return self._available

    async def schedule(self, start: Any, end: Any) -> bool:
        """
        Schedule a future availability window.

        Args:
            start: Window start (ISO string or datetime)
            end: Window end (ISO string or datetime)

        Returns:
            The current flag as reported by the server

        Raises:
            ValidationError: Missing bounds or end not after start
            RemoteConfirmationError: Post failed
        """
        start_at = parse_timestamp(start)
        end_at = parse_timestamp(end)
        if start_at is None or end_at is None:
            raise ValidationError("Both start and end time are required")
        if end_at <= start_at:
            raise ValidationError(
                "Availability window must end after it starts",
                details={"start": start_at.isoformat(), "end": end_at.isoformat()},
            )

        async with self._lock:
            try:
                await self.backend.post_availability(
                    self.agent_id,
                    True,
                    start_at.isoformat(),
                    end_at.isoformat(),
                )
            except AuthenticationMissing:
                raise
            except Exception as exc:
                raise RemoteConfirmationError(
                    "Could not schedule availability",
                    record_id=self.agent_id,
                    details={"cause": str(exc) or type(exc).__name__},
                ) from exc

            self.log.confirmed(self.agent_id, "schedule", start=start_at.isoformat())
            await self._read_back()
            return self._available

    async def _read_back(self) -> None:
        # The post already succeeded; a failed read-back keeps the local view
        try:
            await self.refresh()
        except Exception as exc:
            logger.warning("availability_read_back_failed", agent_id=self.agent_id, error=str(exc))
