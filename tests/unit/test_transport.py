"""
Tests for the dashboard HTTP client and session stores.
"""

import asyncio
import json

import httpx
import pytest

from insurai_engine.config.models import TransportConfig
from insurai_engine.core.lifecycle import QueryLifecycleManager
from insurai_engine.core.snapshot import load_agent_queries, load_snapshot
from insurai_engine.core.state import QueryStore
from insurai_engine.domain.enums import QueryStatus
from insurai_engine.domain.errors import (
    AuthenticationMissing,
    RemoteConfirmationError,
    TransportError,
)
from insurai_engine.transport import DashboardClient, FileSessionStore, InMemorySessionStore


def _client(handler, token="secret-token", **config) -> DashboardClient:
    session = InMemorySessionStore({"token": token} if token else {})
    return DashboardClient(
        TransportConfig(base_url="http://api.test", **config),
        session,
        transport=httpx.MockTransport(handler),
    )


def _run(client: DashboardClient, make_call):
    """Run one client call and close the client."""

    async def scenario():
        async with client:
            return await make_call(client)

    return asyncio.run(scenario())


class TestSessionStores:
    def test_in_memory(self):
        store = InMemorySessionStore()
        assert store.get("token") is None
        store.set("token", "abc")
        assert store.get("token") == "abc"
        store.clear()
        assert store.get("token") is None

    def test_file_round_trip(self, tmp_path):
        path = tmp_path / "session" / "session.json"
        store = FileSessionStore(path)

        assert store.get("token") is None
        store.set("token", "abc")
        store.set("user", "asha")

        assert json.loads(path.read_text()) == {"token": "abc", "user": "asha"}
        assert FileSessionStore(path).get("token") == "abc"
        assert list(path.parent.glob("tmp_*")) == []

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        store = FileSessionStore(path)

        assert store.get("token") is None
        store.set("token", "fresh")
        assert store.get("token") == "fresh"

    def test_clear(self, tmp_path):
        store = FileSessionStore(tmp_path / "session.json")
        store.set("token", "abc")
        store.clear()
        assert store.get("token") is None


class TestDashboardClient:
    def test_sends_bearer_token(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"id": 1, "name": "Asha"}])

        result = _run(_client(handler), lambda c: c.fetch_employees())

        assert result == [{"id": 1, "name": "Asha"}]
        assert seen[0].headers["Authorization"] == "Bearer secret-token"
        assert seen[0].url == "http://api.test/auth/employees"

    def test_missing_token_short_circuits(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=[])

        with pytest.raises(AuthenticationMissing):
            _run(_client(handler, token=None), lambda c: c.fetch_claims())
        assert calls == []

    @pytest.mark.parametrize("payload", [{"claims": []}, "oops", None, 42])
    def test_non_list_payload_is_empty(self, payload):
        def handler(request):
            if payload is None:
                return httpx.Response(200)
            return httpx.Response(200, json=payload)

        assert _run(_client(handler), lambda c: c.fetch_claims()) == []

    def test_error_status_raises(self):
        def handler(request):
            return httpx.Response(503, text="Service Unavailable")

        with pytest.raises(TransportError) as exc_info:
            _run(_client(handler), lambda c: c.fetch_policies())
        assert exc_info.value.status_code == 503

    def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            _run(_client(handler), lambda c: c.fetch_agents())
        assert exc_info.value.status_code is None

    def test_respond_to_query(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": 9, "status": "resolved"})

        _run(_client(handler), lambda c: c.respond_to_query(9, "Approved"))

        assert seen[0].method == "PUT"
        assert seen[0].url.path == "/agent/queries/respond/9"
        assert json.loads(seen[0].content) == {"response": "Approved"}

    def test_fetch_queries_path(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        _run(_client(handler), lambda c: c.fetch_queries(100))
        assert seen[0].url.path == "/agent/queries/all/100"

    def test_fraud_claims_are_typed(self):
        def handler(request):
            return httpx.Response(
                200,
                json=[
                    {"id": 1, "amount": "75.5", "fraudReason": "Duplicate", "fraudFlag": True},
                    "not a claim",
                ],
            )

        fraud = _run(_client(handler), lambda c: c.fetch_fraud_claims())

        assert len(fraud) == 1
        assert fraud[0].fraud_reason == "Duplicate"
        assert fraud[0].amount == 75.5
        assert fraud[0].employee_name == "Unknown"

    def test_post_availability_body(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        _run(
            _client(handler),
            lambda c: c.post_availability(100, True, "2025-03-15T09:00:00", None),
        )

        assert seen[0].method == "POST"
        assert json.loads(seen[0].content) == {
            "agentId": 100,
            "available": True,
            "startTime": "2025-03-15T09:00:00",
            "endTime": None,
        }

    def test_get_availability(self):
        def handler(request):
            assert request.url.path == "/agent/100/availability"
            return httpx.Response(200, json={"available": True, "startTime": "2025-03-15T09:00:00"})

        record = _run(_client(handler), lambda c: c.get_availability(100))

        assert record.available is True
        assert record.start_time == "2025-03-15T09:00:00"

    def test_get_availability_without_flag(self):
        def handler(request):
            return httpx.Response(200, json={"status": "unknown"})

        assert _run(_client(handler), lambda c: c.get_availability(100)) is None


def _dashboard_handler(request: httpx.Request) -> httpx.Response:
    routes = {
        "/agent": [{"id": 100, "name": "Agent Smith"}],
        "/auth/employees": [{"id": 5, "name": "Asha", "employeeId": "EMP-005", "active": True}],
        "/hr": [{"id": 20, "name": "Kiran"}],
        "/admin/claims": [{"id": 1, "employeeId": 5, "assignedHrId": 20, "policyId": 1, "amount": "10"}],
        "/admin/policies": [{"id": 1, "policyName": "Health Gold"}],
        "/admin/claims/fraud": [{"id": 7, "fraudReason": "Duplicate", "status": "Pending"}],
        "/agent/queries/all/100": [{"id": 9, "employeeId": 5, "status": "pending", "queryText": "Hi"}],
    }
    if request.method == "PUT":
        return httpx.Response(500)
    return httpx.Response(200, json=routes.get(request.url.path, []))


class TestSnapshotLoading:
    def test_load_snapshot(self):
        snapshot = _run(_client(_dashboard_handler), load_snapshot)

        assert len(snapshot.people) == 3
        assert [p.policy_name for p in snapshot.policies] == ["Health Gold"]
        claim = snapshot.claims[0]
        assert claim.employee_name == "Asha"
        assert claim.assigned_hr_name == "Kiran"
        assert claim.policy_name == "Health Gold"
        assert claim.amount == 10.0
        assert snapshot.fraud_claims[0].fraud_reason == "Duplicate"

    def test_load_agent_queries(self):
        queries = _run(_client(_dashboard_handler), lambda c: load_agent_queries(c, 100))

        assert len(queries) == 1
        assert queries[0].employee_name == "Asha"
        assert queries[0].status == QueryStatus.PENDING

    def test_server_rejection_rolls_back_submit(self):
        client = _client(_dashboard_handler)

        async def scenario():
            async with client:
                store = QueryStore(await load_agent_queries(client, 100))
                manager = QueryLifecycleManager(store, client)
                with pytest.raises(RemoteConfirmationError) as exc_info:
                    await manager.submit_response(9, "Approved")
                return store, exc_info.value

        store, error = asyncio.run(scenario())

        assert store.get(9).status == QueryStatus.PENDING
        assert isinstance(error.__cause__, TransportError)
