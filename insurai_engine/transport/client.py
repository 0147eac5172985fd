"""
HTTP client for the dashboard API.

Every request carries the bearer credential from the session store; with
no credential the call fails with AuthenticationMissing before anything is
sent.
"""

from typing import Any, Optional

import httpx
import structlog

from insurai_engine.config.models import TransportConfig
from insurai_engine.domain.errors import AuthenticationMissing, TransportError
from insurai_engine.domain.records import AvailabilityRecord, FraudClaim, RecordId
from insurai_engine.transport.session import SessionStore

logger = structlog.get_logger()


class DashboardClient:
    """
    Async client for the dashboard endpoints.

    Collection endpoints return plain lists of wire dicts (anything that is
    not a list reads as []); reconciliation happens in the engine.

    Usage:
        async with DashboardClient(config, session) as client:
            claims = await client.fetch_claims()
            await client.respond_to_query(9, "Approved")
    """

    def __init__(
        self,
        config: TransportConfig,
        session: SessionStore,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.session = session
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "DashboardClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _auth_headers(self) -> dict[str, str]:
        token = self.session.get(self.config.token_key)
        if not token:
            raise AuthenticationMissing("No session token found, please log in again")
        return {"Authorization": f"Bearer {token}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Send an authenticated request and decode the body.

        Raises:
            AuthenticationMissing: No credential in the session store
            TransportError: Network failure or non-2xx response
        """
        headers = self._auth_headers()

        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("request_failed", method=method, path=path, error=str(e))
            raise TransportError(
                f"{method} {path} failed: {e}",
                details={"method": method, "path": path},
            ) from e

        if response.status_code >= 400:
            logger.warning(
                "request_rejected",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise TransportError(
                f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                details={"method": method, "path": path, "body": response.text[:500]},
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _get_list(self, path: str) -> list[Any]:
        payload = await self._request("GET", path)
        return payload if isinstance(payload, list) else []

    # ------------------------------------------------------------------
    # Directories and claims
    # ------------------------------------------------------------------

    async def fetch_agents(self) -> list[dict[str, Any]]:
        return await self._get_list(self.config.endpoints.agents)

    async def fetch_employees(self) -> list[dict[str, Any]]:
        return await self._get_list(self.config.endpoints.employees)

    async def fetch_hr_staff(self) -> list[dict[str, Any]]:
        return await self._get_list(self.config.endpoints.hr_staff)

    async def fetch_claims(self) -> list[dict[str, Any]]:
        return await self._get_list(self.config.endpoints.claims)

    async def fetch_policies(self) -> list[dict[str, Any]]:
        return await self._get_list(self.config.endpoints.policies)

    async def fetch_fraud_claims(self) -> list[FraudClaim]:
        """Fraud alerts arrive already enriched and flagged."""
        payload = await self._get_list(self.config.endpoints.fraud_claims)
        return [FraudClaim.model_validate(item) for item in payload if isinstance(item, dict)]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def fetch_queries(self, agent_id: RecordId) -> list[dict[str, Any]]:
        path = self.config.endpoints.agent_queries.format(agent_id=agent_id)
        return await self._get_list(path)

    async def respond_to_query(self, query_id: RecordId, response: str) -> Any:
        """Confirm a submitted or edited response."""
        path = self.config.endpoints.respond_query.format(query_id=query_id)
        return await self._request("PUT", path, json={"response": response})

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    async def post_availability(
        self,
        agent_id: RecordId,
        available: bool,
        start_time: Optional[str],
        end_time: Optional[str],
    ) -> Any:
        return await self._request(
            "POST",
            self.config.endpoints.availability,
            json={
                "agentId": agent_id,
                "available": available,
                "startTime": start_time,
                "endTime": end_time,
            },
        )

    async def get_availability(self, agent_id: RecordId) -> Optional[AvailabilityRecord]:
        """Server availability; None when the payload carries no boolean flag."""
        path = self.config.endpoints.agent_availability.format(agent_id=agent_id)
        payload = await self._request("GET", path)
        if not isinstance(payload, dict) or not isinstance(payload.get("available"), bool):
            return None
        return AvailabilityRecord(
            agent_id=agent_id,
            available=payload["available"],
            start_time=payload.get("startTime"),
            end_time=payload.get("endTime"),
        )
