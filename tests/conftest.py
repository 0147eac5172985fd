"""
Shared test fixtures for InsurAI engine tests.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from insurai_engine.config.models import LifecycleConfig
from insurai_engine.core.lifecycle import QueryLifecycleManager
from insurai_engine.core.state import QueryStore
from insurai_engine.domain.enums import QueryStatus
from insurai_engine.domain.records import QueryRecord


FIXED_NOW = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)


# =============================================================================
# Fakes
# =============================================================================


class FakeConfirmer:
    """
    In-process stand-in for the remote query endpoint.

    Records every call. Set `fail_with` to make calls raise, or `gate` to an
    asyncio.Event to hold confirmations until the test releases them.
    """

    def __init__(self, fail_with: Optional[BaseException] = None):
        self.fail_with = fail_with
        self.fail_ids: set[Any] = set()
        self.gate: Optional[asyncio.Event] = None
        self.calls: list[tuple[Any, str]] = []

    async def respond_to_query(self, query_id: Any, response: str) -> dict:
        self.calls.append((query_id, response))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        if query_id in self.fail_ids:
            raise ConnectionError(f"server rejected {query_id}")
        return {"id": query_id, "response": response}


# =============================================================================
# Directory Fixtures
# =============================================================================


@pytest.fixture
def employees() -> list[dict]:
    """Employee directory with a business code per employee."""
    return [
        {"id": 5, "name": "Asha", "employeeId": "EMP-005", "email": "asha@example.com", "active": True},
        {"id": 6, "name": "Ravi", "employeeId": 6006, "active": False},
        {"id": 7, "name": "Meera", "employeeId": "EMP-007", "active": True},
    ]


@pytest.fixture
def hrs() -> list[dict]:
    return [{"id": 20, "name": "Kiran"}, {"id": 21, "name": "Farah"}]


@pytest.fixture
def agents() -> list[dict]:
    return [{"id": 100, "name": "Agent Smith", "email": "smith@example.com"}]


@pytest.fixture
def policies() -> list[dict]:
    return [
        {"id": 1, "policyName": "Health Gold"},
        {"id": 2, "policyName": "Dental Basic"},
    ]


@pytest.fixture
def raw_claims() -> list[dict]:
    """Claims mixing both foreign-key naming conventions."""
    return [
        {
            "id": 1,
            "employeeId": 5,
            "assignedHrId": 20,
            "policyId": 1,
            "amount": "1200.50",
            "status": "Pending",
            "priority": "High",
            "claimDate": "2025-01-10T10:00:00",
            "createdAt": "2025-01-10T10:00:00",
        },
        {
            "id": 2,
            "employee_id": 6,
            "assigned_hr_id": 21,
            "policy_id": 2,
            "amount": 300,
            "status": "Resolved",
            "priority": "Low",
            "claimDate": "2025-02-03T08:00:00",
            "updatedAt": "2025-03-14T08:00:00",
            "documents": None,
            "remarks": None,
        },
        {
            "id": 3,
            "employeeId": 99,
            "policyId": 42,
            "amount": "abc",
            "status": "Rejected",
            "priority": "High",
            "claimDate": "not a date",
        },
    ]


# =============================================================================
# Query Fixtures
# =============================================================================


@pytest.fixture
def queries() -> list[QueryRecord]:
    """Two pending queries and one resolved query."""
    return [
        QueryRecord(id=9, employee_name="Asha", query_text="Status of my claim?"),
        QueryRecord(id=10, employee_name="Ravi", query_text="Is dental covered?", claim_type="Dental"),
        QueryRecord(
            id=11,
            employee_name="Meera",
            query_text="Reimbursement timeline",
            status=QueryStatus.RESOLVED,
            response="Within 10 days",
            created_at="2025-03-10T09:00:00",
            resolved_at="2025-03-10T15:00:00",
        ),
    ]


@pytest.fixture
def store(queries: list[QueryRecord]) -> QueryStore:
    return QueryStore(queries)


@pytest.fixture
def confirmer() -> FakeConfirmer:
    return FakeConfirmer()


@pytest.fixture
def manager(store: QueryStore, confirmer: FakeConfirmer) -> QueryLifecycleManager:
    """Lifecycle manager with a fixed clock and a short confirmation timeout."""
    return QueryLifecycleManager(
        store,
        confirmer,
        config=LifecycleConfig(confirm_timeout_seconds=1.0),
        clock=lambda: FIXED_NOW,
    )
