"""
Tests for the command-line interface.
"""

import json

import pytest
from click.testing import CliRunner

from insurai_engine.cli import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def snapshot_file(tmp_path, raw_claims, employees, hrs, agents, policies):
    path = tmp_path / "snapshot.json"
    path.write_text(
        json.dumps(
            {
                "agents": agents,
                "employees": employees,
                "hrs": hrs,
                "claims": raw_claims,
                "policies": policies,
                "queries": [
                    {"id": 9, "employeeId": 5, "status": "pending", "queryText": "Hi"},
                    {
                        "id": 10,
                        "employeeId": 7,
                        "status": "resolved",
                        "claimType": "Dental",
                        "createdAt": "2025-03-10T09:00:00",
                        "resolvedAt": "2025-03-10T11:00:00",
                    },
                ],
            }
        )
    )
    return path


class TestReconcileCommand:
    def test_outputs_enriched_claims(self, runner, snapshot_file):
        result = runner.invoke(main, ["reconcile", str(snapshot_file)])

        assert result.exit_code == 0, result.output
        claims = json.loads(result.output)
        assert [c["employeeName"] for c in claims] == ["Asha", "Ravi", "Unknown"]
        assert claims[0]["amount"] == 1200.5

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["reconcile", str(tmp_path / "nope.json")])
        assert result.exit_code != 0

    def test_non_object_snapshot(self, runner, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]")
        result = runner.invoke(main, ["reconcile", str(path)])
        assert result.exit_code == 2

    def test_malformed_collection(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"claims": {"id": 1}}))
        result = runner.invoke(main, ["reconcile", str(path)])
        assert result.exit_code == 1


class TestStatsCommand:
    def test_claims(self, runner, snapshot_file):
        result = runner.invoke(main, ["stats", str(snapshot_file), "--today", "2025-03-14"])

        assert result.exit_code == 0, result.output
        stats = json.loads(result.output)
        assert stats["total"] == 3
        assert stats["pending"] == 1
        assert stats["resolved_today"] == 1
        assert stats["total_amount"] == pytest.approx(1500.5)

    def test_queries(self, runner, snapshot_file):
        result = runner.invoke(main, ["stats", str(snapshot_file), "--kind", "queries"])

        assert result.exit_code == 0, result.output
        stats = json.loads(result.output)
        assert stats["response_rate"] == 50
        assert stats["avg_response_hours"] == pytest.approx(2.0)
        assert stats["by_type"] == {"-": 1, "Dental": 1}

    def test_users(self, runner, snapshot_file):
        result = runner.invoke(main, ["stats", str(snapshot_file), "-k", "users"])

        assert result.exit_code == 0, result.output
        stats = json.loads(result.output)
        assert stats["total"] == 6
        assert stats["inactive"] == 1


class TestSortCommand:
    def test_sort_desc_by_amount(self, runner, snapshot_file):
        result = runner.invoke(
            main, ["sort", str(snapshot_file), "--key", "amount", "--direction", "desc"]
        )

        assert result.exit_code == 0, result.output
        assert [c["id"] for c in json.loads(result.output)] == [1, 2, 3]

    def test_status_and_search(self, runner, snapshot_file):
        result = runner.invoke(
            main, ["sort", str(snapshot_file), "--status", "Resolved", "--search", "ravi"]
        )

        assert result.exit_code == 0, result.output
        assert [c["id"] for c in json.loads(result.output)] == [2]


class TestConfigCommands:
    def test_validate_config(self, runner, tmp_path):
        path = tmp_path / "insurai.yaml"
        path.write_text("transport:\n  base_url: https://api.example.com\n")

        result = runner.invoke(main, ["--config", str(path), "validate-config"])

        assert result.exit_code == 0
        assert "Configuration is valid." in result.output

    def test_validate_config_error(self, runner, tmp_path):
        path = tmp_path / "insurai.yaml"
        path.write_text("transport:\n  base_url: ftp://api.example.com\n")

        result = runner.invoke(main, ["--config", str(path), "validate-config"])

        assert result.exit_code == 1

    def test_status(self, runner, tmp_path):
        path = tmp_path / "insurai.yaml"
        path.write_text(f"transport:\n  session_file: {tmp_path / 'session.json'}\n")

        result = runner.invoke(main, ["--config", str(path), "status"])

        assert result.exit_code == 0
        assert "Session: missing" in result.output
