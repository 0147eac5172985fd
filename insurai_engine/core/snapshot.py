"""
Dashboard snapshot loading.

Fetches every collection the dashboards need in one concurrent round and
reconciles them into a single immutable snapshot.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import structlog

from insurai_engine.core.reconciler import (
    EntityReconciler,
    merge_directory,
    normalize_queries,
)
from insurai_engine.domain.records import (
    EnrichedClaim,
    FraudClaim,
    PersonRecord,
    PolicyRecord,
    QueryRecord,
    RecordId,
)


logger = structlog.get_logger()


class SnapshotSource(Protocol):
    """Collection endpoints a snapshot is loaded from."""

    async def fetch_agents(self) -> list[Any]: ...
    async def fetch_employees(self) -> list[Any]: ...
    async def fetch_hr_staff(self) -> list[Any]: ...
    async def fetch_claims(self) -> list[Any]: ...
    async def fetch_policies(self) -> list[Any]: ...
    async def fetch_fraud_claims(self) -> list[Any]: ...
    async def fetch_queries(self, agent_id: RecordId) -> list[Any]: ...


@dataclass(frozen=True)
class DashboardSnapshot:
    """One consistent view of the admin dashboard data."""

    people: tuple[PersonRecord, ...] = ()
    policies: tuple[PolicyRecord, ...] = ()
    claims: tuple[EnrichedClaim, ...] = ()
    fraud_claims: tuple[FraudClaim, ...] = ()

    # Raw directories, kept for re-joining claims later
    employees: tuple[Any, ...] = field(default=(), repr=False)
    hrs: tuple[Any, ...] = field(default=(), repr=False)


def _policy_records(policies: list[Any]) -> list[PolicyRecord]:
    records = []
    for item in policies:
        if isinstance(item, PolicyRecord):
            records.append(item)
        elif isinstance(item, dict) and item.get("id") is not None:
            records.append(PolicyRecord.model_validate(item))
    return records


async def load_snapshot(
    client: SnapshotSource,
    reconciler: Optional[EntityReconciler] = None,
) -> DashboardSnapshot:
    """
    Fetch and reconcile all dashboard collections.

    Args:
        client: Source of the raw collections
        reconciler: Reconciler to use (a fresh one if omitted)

    Returns:
        DashboardSnapshot with enriched claims and merged people

    Raises:
        AuthenticationMissing: No credential
        TransportError: Any fetch failed
    """
    reconciler = reconciler or EntityReconciler()

    agents, employees, hrs, claims, policies, fraud = await asyncio.gather(
        client.fetch_agents(),
        client.fetch_employees(),
        client.fetch_hr_staff(),
        client.fetch_claims(),
        client.fetch_policies(),
        client.fetch_fraud_claims(),
    )

    employees = tuple(employees)
    hrs = tuple(hrs)
    enriched = reconciler.reconcile(tuple(claims), employees, hrs, tuple(policies))

    snapshot = DashboardSnapshot(
        people=tuple(merge_directory(agents, employees, hrs)),
        policies=tuple(_policy_records(policies)),
        claims=tuple(enriched),
        fraud_claims=tuple(
            f if isinstance(f, FraudClaim) else FraudClaim.model_validate(f)
            for f in fraud
        ),
        employees=employees,
        hrs=hrs,
    )

    logger.info(
        "snapshot_loaded",
        people=len(snapshot.people),
        policies=len(snapshot.policies),
        claims=len(snapshot.claims),
        fraud_claims=len(snapshot.fraud_claims),
    )
    return snapshot


async def load_agent_queries(
    client: SnapshotSource,
    agent_id: RecordId,
) -> list[QueryRecord]:
    """Fetch and normalize the queries assigned to one agent."""
    raw_queries, employees = await asyncio.gather(
        client.fetch_queries(agent_id),
        client.fetch_employees(),
    )
    queries = normalize_queries(raw_queries, employees)
    logger.debug("agent_queries_loaded", agent_id=agent_id, queries=len(queries))
    return queries
