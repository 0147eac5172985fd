"""
Entity reconciliation for the InsurAI engine.

Joins raw claims against the employee, HR and policy directories, merges
the per-role directories into one people list, and normalizes agent
queries. Everything here is a pure function of its inputs.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Optional

import structlog

from insurai_engine.domain.enums import PersonRole, QueryStatus
from insurai_engine.domain.errors import ReconciliationError
from insurai_engine.domain.records import (
    FOREIGN_KEY_CANDIDATES,
    UNASSIGNED_HR,
    UNKNOWN_EMPLOYEE,
    UNKNOWN_EMPLOYEE_CODE,
    UNKNOWN_POLICY,
    AssistedClaim,
    EnrichedClaim,
    EngineRecord,
    PersonRecord,
    PolicyRecord,
    QueryRecord,
    first_present,
)


logger = structlog.get_logger()


def _as_mapping(item: Any) -> dict[str, Any]:
    """Wire-named dict view of a raw item or record."""
    if isinstance(item, EngineRecord):
        return item.model_dump(by_alias=True)
    if isinstance(item, Mapping):
        return dict(item)
    raise ReconciliationError(
        f"Expected a record or mapping, got {type(item).__name__}",
        details={"type": type(item).__name__},
    )


def _require_sequence(name: str, value: Any) -> Sequence:
    """Reject anything that is not a list-like sequence."""
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
        raise ReconciliationError(
            f"Input '{name}' must be a sequence, got {type(value).__name__}",
            details={"input": name, "type": type(value).__name__},
        )
    return value


def _index_by_id(items: Sequence, model: type[EngineRecord]) -> dict[Any, Any]:
    """
    Index a directory by id, keeping the first occurrence of each id.

    First occurrence in collection order wins, which is what a linear scan
    would find.
    """
    index: dict[Any, Any] = {}
    for item in items:
        if isinstance(item, model):
            record = item
        else:
            data = _as_mapping(item)
            if data.get("id") is None:
                continue
            record = model.model_validate(data)
        index.setdefault(record.id, record)
    return index


class EntityReconciler:
    """
    Joins claims with the people and policy directories.

    The join keys are data (FOREIGN_KEY_CANDIDATES): supporting a new
    naming variant is a matter of adding a candidate name.

    The reconciler remembers its last result keyed by the identity of the
    four input collections, so repeated calls with the same snapshot are
    free. A failed call leaves the previous result in place.

    Usage:
        reconciler = EntityReconciler()
        enriched = reconciler.reconcile(claims, employees, hrs, policies)
    """

    def __init__(self, join_keys: Optional[dict[str, tuple[str, ...]]] = None):
        self.join_keys = join_keys or FOREIGN_KEY_CANDIDATES
        self._last_inputs: Optional[tuple[Any, ...]] = None
        self._last_result: list[EnrichedClaim] = []

    @property
    def last_result(self) -> list[EnrichedClaim]:
        """Most recent successful reconciliation."""
        return list(self._last_result)

    def reconcile(
        self,
        claims: Sequence,
        employees: Sequence,
        hrs: Sequence,
        policies: Sequence,
    ) -> list[EnrichedClaim]:
        """
        Produce enriched claims.

        Args:
            claims: Raw claims (mappings or ClaimRecord)
            employees: Employee directory
            hrs: HR directory
            policies: Policy catalogue

        Returns:
            One EnrichedClaim per claim, in claim order

        Raises:
            ReconciliationError: If any input is not a sequence
        """
        inputs = (claims, employees, hrs, policies)
        if self._last_inputs is not None and all(
            a is b for a, b in zip(inputs, self._last_inputs)
        ):
            return list(self._last_result)

        result = reconcile(claims, employees, hrs, policies, join_keys=self.join_keys)

        self._last_inputs = inputs
        self._last_result = result
        return list(result)


def reconcile(
    claims: Sequence,
    employees: Sequence,
    hrs: Sequence,
    policies: Sequence,
    join_keys: Optional[dict[str, tuple[str, ...]]] = None,
) -> list[EnrichedClaim]:
    """
    Join claims with employee, HR and policy records.

    Missing matches fall back to the sentinel texts; a missing documents
    list becomes [] and missing remarks become "".

    Raises:
        ReconciliationError: If any input is not a sequence
    """
    _require_sequence("claims", claims)
    _require_sequence("employees", employees)
    _require_sequence("hrs", hrs)
    _require_sequence("policies", policies)

    keys = join_keys or FOREIGN_KEY_CANDIDATES

    employee_index = _index_by_id(employees, PersonRecord)
    hr_index = _index_by_id(hrs, PersonRecord)
    policy_index = _index_by_id(policies, PolicyRecord)

    enriched: list[EnrichedClaim] = []
    for claim in claims:
        data = _as_mapping(claim)

        employee_id = first_present(data, keys["employee_id"])
        hr_id = first_present(data, keys["assigned_hr_id"])
        policy_id = first_present(data, keys["policy_id"])

        employee = employee_index.get(employee_id) if employee_id is not None else None
        hr = hr_index.get(hr_id) if hr_id is not None else None
        policy = policy_index.get(policy_id) if policy_id is not None else None

        for candidates in keys.values():
            for key in candidates:
                data.pop(key, None)

        data.update(
            employee_id=employee_id,
            assigned_hr_id=hr_id,
            policy_id=policy_id,
            employee_name=(employee.name if employee else None) or UNKNOWN_EMPLOYEE,
            employee_id_display=(employee.employee_code if employee else None)
            or UNKNOWN_EMPLOYEE_CODE,
            assigned_hr_name=(hr.name if hr else None) or UNASSIGNED_HR,
            policy_name=(policy.policy_name if policy else None) or UNKNOWN_POLICY,
        )
        # Stale display names from an earlier enrichment must not shadow the join
        for wire_name in ("employeeName", "employeeIdDisplay", "assignedHrName", "policyName"):
            data.pop(wire_name, None)

        enriched.append(EnrichedClaim.model_validate(data))

    logger.debug(
        "claims_reconciled",
        claims=len(enriched),
        employees=len(employee_index),
        hrs=len(hr_index),
        policies=len(policy_index),
    )
    return enriched


def merge_directory(
    agents: Sequence,
    employees: Sequence,
    hrs: Sequence,
) -> list[PersonRecord]:
    """
    Merge the per-role directories into one people list.

    Agents and HR staff are always active; employees carry their own
    active flag.

    Raises:
        ReconciliationError: If any input is not a sequence
    """
    _require_sequence("agents", agents)
    _require_sequence("employees", employees)
    _require_sequence("hrs", hrs)

    people: list[PersonRecord] = []
    for role, source in (
        (PersonRole.AGENT, agents),
        (PersonRole.EMPLOYEE, employees),
        (PersonRole.HR, hrs),
    ):
        for item in source:
            data = _as_mapping(item)
            data["role"] = role
            if role != PersonRole.EMPLOYEE:
                data["active"] = True
            else:
                data["active"] = data.get("active")
            people.append(PersonRecord.model_validate(data))
    return people


def normalize_queries(
    raw_queries: Sequence,
    employees: Sequence = (),
) -> list[QueryRecord]:
    """
    Normalize queries as delivered by the agent query endpoint.

    The wire status is lower-case; only "resolved" maps to Resolved. The
    employee name comes from the embedded employee object, then the
    employee directory, then a generic label.

    Raises:
        ReconciliationError: If any input is not a sequence
    """
    _require_sequence("queries", raw_queries)
    _require_sequence("employees", employees)

    names = {
        person_id: person.name
        for person_id, person in _index_by_id(employees, PersonRecord).items()
    }

    queries: list[QueryRecord] = []
    for item in raw_queries:
        if isinstance(item, QueryRecord):
            queries.append(item)
            continue

        data = _as_mapping(item)
        employee_id = data.get("employeeId")
        embedded = data.get("employee")
        embedded_name = embedded.get("name") if isinstance(embedded, Mapping) else None
        raw_status = str(data.get("status") or "").lower()

        queries.append(
            QueryRecord(
                id=data["id"],
                employee_id=employee_id,
                employee_name=embedded_name
                or names.get(employee_id)
                or f"Employee {employee_id}",
                query_text=data.get("queryText") or data.get("query") or "",
                policy_name=data.get("policyName") or "-",
                claim_type=data.get("claimType") or "-",
                agent_id=data.get("agentId"),
                created_at=data.get("createdAt"),
                updated_at=data.get("updatedAt"),
                resolved_at=data.get("resolvedAt"),
                status=QueryStatus.RESOLVED if raw_status == "resolved" else QueryStatus.PENDING,
                response=data.get("response") or "",
            )
        )
    return queries


def derive_assisted_claims(queries: Sequence[QueryRecord]) -> list[AssistedClaim]:
    """One assisted claim per resolved query, in query order."""
    return [
        AssistedClaim(
            id=query.id,
            employee=query.employee_name,
            claim_type=query.claim_type or "-",
            policy_name=query.policy_name or "-",
            date=query.updated_at,
        )
        for query in queries
        if query.status == QueryStatus.RESOLVED
    ]
