"""
Tests for entity reconciliation.
"""

import pytest

from insurai_engine.core.reconciler import (
    EntityReconciler,
    derive_assisted_claims,
    merge_directory,
    normalize_queries,
    reconcile,
)
from insurai_engine.domain.enums import PersonRole, QueryStatus
from insurai_engine.domain.errors import ReconciliationError
from insurai_engine.domain.records import (
    UNASSIGNED_HR,
    UNKNOWN_EMPLOYEE,
    UNKNOWN_EMPLOYEE_CODE,
    UNKNOWN_POLICY,
    EnrichedClaim,
    PersonRecord,
    QueryRecord,
)


class TestReconcile:
    """Tests for the claim join."""

    def test_single_pending_claim_against_empty_policies(self):
        claims = [{"id": 1, "employeeId": 5, "amount": "1200.50", "status": "Pending"}]
        employees = [{"id": 5, "name": "Asha"}]

        enriched = reconcile(claims, employees, [], [])

        assert len(enriched) == 1
        claim = enriched[0]
        assert claim.employee_name == "Asha"
        assert claim.policy_name == "N/A"
        assert claim.assigned_hr_name == "Not Assigned"
        assert claim.amount == pytest.approx(1200.5)
        assert claim.status == "Pending"

    def test_joins_both_key_conventions(self, raw_claims, employees, hrs, policies):
        enriched = reconcile(raw_claims, employees, hrs, policies)

        first, second, _ = enriched
        assert first.employee_name == "Asha"
        assert first.employee_id_display == "EMP-005"
        assert first.assigned_hr_name == "Kiran"
        assert first.policy_name == "Health Gold"

        assert second.employee_id == 6
        assert second.employee_name == "Ravi"
        assert second.employee_id_display == "6006"
        assert second.assigned_hr_name == "Farah"
        assert second.policy_name == "Dental Basic"

    def test_failed_lookups_use_sentinels(self, raw_claims, employees, hrs, policies):
        unmatched = reconcile(raw_claims, employees, hrs, policies)[2]

        assert unmatched.employee_name == UNKNOWN_EMPLOYEE
        assert unmatched.employee_id_display == UNKNOWN_EMPLOYEE_CODE
        assert unmatched.assigned_hr_name == UNASSIGNED_HR
        assert unmatched.policy_name == UNKNOWN_POLICY
        assert unmatched.amount == 0.0

    def test_display_fields_never_missing(self, raw_claims):
        for claim in reconcile(raw_claims, [], [], []):
            assert claim.employee_name is not None
            assert claim.assigned_hr_name is not None
            assert claim.policy_name is not None

    def test_documents_and_remarks_defaulted(self, raw_claims, employees, hrs, policies):
        second = reconcile(raw_claims, employees, hrs, policies)[1]
        assert second.documents == []
        assert second.remarks == ""

    def test_nameless_match_falls_back(self):
        enriched = reconcile(
            [{"id": 1, "employeeId": 5, "policyId": 3}],
            [{"id": 5, "name": None}],
            [],
            [{"id": 3, "policyName": ""}],
        )
        assert enriched[0].employee_name == UNKNOWN_EMPLOYEE
        assert enriched[0].policy_name == UNKNOWN_POLICY

    def test_first_directory_entry_wins(self):
        employees = [{"id": 5, "name": "First"}, {"id": 5, "name": "Second"}]
        enriched = reconcile([{"id": 1, "employeeId": 5}], employees, [], [])
        assert enriched[0].employee_name == "First"

    def test_stale_display_names_are_replaced(self, employees):
        claims = [{"id": 1, "employeeId": 5, "employeeName": "Old Name", "policyName": "Old"}]
        enriched = reconcile(claims, employees, [], [])
        assert enriched[0].employee_name == "Asha"
        assert enriched[0].policy_name == UNKNOWN_POLICY

    def test_unknown_fields_survive(self, employees):
        claims = [{"id": 1, "employeeId": 5, "title": "Hospital stay"}]
        enriched = reconcile(claims, employees, [], [])
        assert enriched[0].to_wire()["title"] == "Hospital stay"

    def test_wire_output_is_camel_case_with_numeric_amount(self, raw_claims, employees, hrs, policies):
        wire = reconcile(raw_claims, employees, hrs, policies)[0].to_wire()
        assert wire["employeeName"] == "Asha"
        assert wire["assignedHrName"] == "Kiran"
        assert isinstance(wire["amount"], float)

    def test_preserves_claim_order(self, raw_claims, employees, hrs, policies):
        enriched = reconcile(raw_claims, employees, hrs, policies)
        assert [c.id for c in enriched] == [1, 2, 3]

    def test_accepts_validated_records(self, raw_claims, employees, hrs, policies):
        once = reconcile(raw_claims, employees, hrs, policies)
        twice = reconcile(once, employees, hrs, policies)
        assert [c.model_dump() for c in twice] == [c.model_dump() for c in once]

    def test_loosely_typed_directory_rows(self):
        claims = [{"id": 1, "employeeId": 5, "assignedHrId": 20}]
        employees = [{"id": 5, "name": "Asha", "active": None, "role": "EMPLOYEE"}]
        hrs = [{"id": 20, "name": "Kiran", "role": "hr_manager", "active": "yes"}]

        claim = reconcile(claims, employees, hrs, [])[0]

        assert claim.employee_name == "Asha"
        assert claim.assigned_hr_name == "Kiran"

    def test_numeric_text_fields_become_strings(self):
        claims = [{"id": 1, "employeeId": 5, "status": 2, "priority": 1, "remarks": 7}]

        claim = reconcile(claims, [], [], [])[0]

        assert claim.remarks == "7"
        assert claim.status == "2"
        assert claim.priority == "1"
        assert claim.employee_id == 5

    @pytest.mark.parametrize("bad", [None, "claims", {"id": 1}, 42])
    def test_non_sequence_input_rejected(self, bad, employees):
        with pytest.raises(ReconciliationError) as exc_info:
            reconcile(bad, employees, [], [])
        assert exc_info.value.details["input"] == "claims"

    def test_non_mapping_item_rejected(self):
        with pytest.raises(ReconciliationError):
            reconcile([42], [], [], [])


class TestEntityReconciler:
    """Tests for the memoizing reconciler."""

    def test_idempotent(self, raw_claims, employees, hrs, policies):
        reconciler = EntityReconciler()
        first = reconciler.reconcile(raw_claims, employees, hrs, policies)
        second = reconciler.reconcile(list(raw_claims), list(employees), hrs, policies)
        assert first == second

    def test_memoizes_on_identity(self, raw_claims, employees, hrs, policies):
        reconciler = EntityReconciler()
        first = reconciler.reconcile(raw_claims, employees, hrs, policies)
        second = reconciler.reconcile(raw_claims, employees, hrs, policies)
        assert first == second
        assert all(a is b for a, b in zip(first, second))

    def test_failure_retains_previous_result(self, raw_claims, employees, hrs, policies):
        reconciler = EntityReconciler()
        good = reconciler.reconcile(raw_claims, employees, hrs, policies)

        with pytest.raises(ReconciliationError):
            reconciler.reconcile(raw_claims, None, hrs, policies)

        assert reconciler.last_result == good

    def test_custom_join_keys(self):
        reconciler = EntityReconciler(
            join_keys={
                "employee_id": ("empRef",),
                "assigned_hr_id": ("hrRef",),
                "policy_id": ("planRef",),
            }
        )
        enriched = reconciler.reconcile(
            [{"id": 1, "empRef": 5, "planRef": 2}],
            [{"id": 5, "name": "Asha"}],
            [],
            [{"id": 2, "policyName": "Dental Basic"}],
        )
        assert enriched[0].employee_name == "Asha"
        assert enriched[0].policy_name == "Dental Basic"
        assert isinstance(enriched[0], EnrichedClaim)


class TestMergeDirectory:
    def test_roles_and_active_flags(self, agents, employees, hrs):
        people = merge_directory(agents, employees, hrs)

        assert len(people) == len(agents) + len(employees) + len(hrs)
        by_role = {}
        for person in people:
            by_role.setdefault(person.role, []).append(person)

        assert all(p.active for p in by_role[PersonRole.AGENT])
        assert all(p.active for p in by_role[PersonRole.HR])
        assert [p.active for p in by_role[PersonRole.EMPLOYEE]] == [True, False, True]

    def test_employee_without_flag_is_inactive(self):
        people = merge_directory([], [{"id": 1, "name": "Nia"}], [])
        assert people[0].active is False

    @pytest.mark.parametrize(
        "flag, expected",
        [(None, False), ("false", False), ("TRUE", True), (0, False), (1, True)],
    )
    def test_employee_flag_spellings(self, flag, expected):
        people = merge_directory([], [{"id": 1, "name": "Nia", "active": flag}], [])
        assert people[0].active is expected


class TestPersonRecord:
    def test_role_matches_case_insensitively(self):
        assert PersonRecord(id=1, role="employee").role == PersonRole.EMPLOYEE
        assert PersonRecord(id=1, role=" HR ").role == PersonRole.HR

    def test_unknown_role_is_none(self):
        assert PersonRecord(id=1, role="SUPERVISOR").role is None
        assert PersonRecord(id=1, role=3).role is None


class TestNormalizeQueries:
    def test_status_and_defaults(self, employees):
        raw = [
            {"id": 1, "employeeId": 5, "status": "resolved", "queryText": "q1", "response": "done"},
            {"id": 2, "employeeId": 7, "status": "open", "queryText": "q2"},
            {"id": 3, "employeeId": 44, "status": None, "response": None},
        ]
        queries = normalize_queries(raw, employees)

        assert [q.status for q in queries] == [
            QueryStatus.RESOLVED,
            QueryStatus.PENDING,
            QueryStatus.PENDING,
        ]
        assert queries[0].employee_name == "Asha"
        assert queries[1].employee_name == "Meera"
        assert queries[2].employee_name == "Employee 44"
        assert queries[2].policy_name == "-"
        assert queries[2].claim_type == "-"
        assert queries[2].response == ""

    def test_embedded_employee_name_preferred(self, employees):
        raw = [{"id": 1, "employeeId": 5, "employee": {"name": "Asha K."}, "status": "pending"}]
        assert normalize_queries(raw, employees)[0].employee_name == "Asha K."


class TestDeriveAssistedClaims:
    def test_one_per_resolved_query(self, queries):
        resolved = queries[2].model_copy(update={"updated_at": "2025-03-10T15:00:00"})
        assisted = derive_assisted_claims([queries[0], resolved])

        assert len(assisted) == 1
        claim = assisted[0]
        assert claim.id == 11
        assert claim.employee == "Meera"
        assert claim.status == "Approved"
        assert claim.date == "2025-03-10T15:00:00"
        assert claim.to_wire()["type"] == "-"

    def test_no_resolved_queries(self):
        assert derive_assisted_claims([QueryRecord(id=1)]) == []
