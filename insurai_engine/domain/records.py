"""
Record models for the InsurAI engine.

Attribute names are snake_case; the transport's camelCase names are the
aliases, so raw JSON payloads validate directly. Records are frozen: every
change produces a new record.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from insurai_engine.domain.enums import PersonRole, QueryStatus
from insurai_engine.utils.parsing import parse_amount


RecordId = Union[int, str]

# Raw timestamps are kept as delivered and parsed on demand
Timestamp = Any

# Sentinel defaults for failed lookups
UNKNOWN_EMPLOYEE = "Unknown"
UNKNOWN_EMPLOYEE_CODE = "N/A"
UNASSIGNED_HR = "Not Assigned"
UNKNOWN_POLICY = "N/A"

_TRUTHY = frozenset({"true", "1", "yes", "y", "active"})

# Canonical foreign-key field -> wire names tried in order; first non-null wins
FOREIGN_KEY_CANDIDATES: dict[str, tuple[str, ...]] = {
    "employee_id": ("employeeId", "employee_id"),
    "assigned_hr_id": ("assignedHrId", "assigned_hr_id"),
    "policy_id": ("policyId", "policy_id"),
}


def first_present(data: dict[str, Any], candidates: tuple[str, ...]) -> Any:
    """Return the first non-null value among candidate keys."""
    for key in candidates:
        value = data.get(key)
        if value is not None:
            return value
    return None


class EngineRecord(BaseModel):
    """Base for all engine records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Plain camelCase dict for the visualization and export collaborators."""
        return self.model_dump(by_alias=True, mode="json")


def record_value(record: Any, name: str) -> Any:
    """
    Read a field from a record or mapping by attribute name or wire alias.

    Args:
        record: EngineRecord or mapping
        name: snake_case attribute name or camelCase wire name

    Returns:
        Field value, or None if absent
    """
    if isinstance(record, dict):
        return record.get(name)

    if name in type(record).model_fields:
        return getattr(record, name)

    for field_name, info in type(record).model_fields.items():
        if (info.alias or to_camel(field_name)) == name:
            return getattr(record, field_name)

    extra = record.model_extra or {}
    return extra.get(name)


# ============================================================================
# DIRECTORY RECORDS
# ============================================================================

class PersonRecord(EngineRecord):
    """A person from the agent, employee or HR directory."""

    id: RecordId
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[PersonRole] = None
    active: bool = True

    # Business identifier shown in claim tables, distinct from id
    employee_code: Optional[str] = Field(None, alias="employeeId")

    created_at: Timestamp = None

    @field_validator("employee_code", mode="before")
    @classmethod
    def stringify_code(cls, v: Any) -> Any:
        """Employee codes are displayed as text."""
        return str(v) if v is not None else None

    @field_validator("role", mode="before")
    @classmethod
    def lenient_role(cls, v: Any) -> Optional[PersonRole]:
        """Match roles case-insensitively; unknown roles become None."""
        if isinstance(v, PersonRole):
            return v
        if not isinstance(v, str):
            return None
        wanted = v.strip().casefold()
        for role in PersonRole:
            if role.value.casefold() == wanted:
                return role
        return None

    @field_validator("active", mode="before")
    @classmethod
    def lenient_active(cls, v: Any) -> bool:
        # Directories send null, strings and 0/1 for the flag
        if v is None:
            return False
        if isinstance(v, str):
            return v.strip().lower() in _TRUTHY
        return bool(v)


class PolicyRecord(EngineRecord):
    """A policy from the policy catalogue."""

    id: RecordId
    policy_name: Optional[str] = None


# ============================================================================
# CLAIM RECORDS
# ============================================================================

class ClaimRecord(EngineRecord):
    """
    Raw claim as delivered by the claims source.

    Foreign keys arrive under either naming convention; both are folded into
    the canonical field before validation.
    """

    id: RecordId

    employee_id: Optional[RecordId] = None
    assigned_hr_id: Optional[RecordId] = None
    policy_id: Optional[RecordId] = None

    amount: Any = None
    status: Optional[str] = None
    priority: Optional[str] = None

    claim_date: Timestamp = None
    created_at: Timestamp = None
    updated_at: Timestamp = None

    documents: list[str] = Field(default_factory=list)
    remarks: str = ""

    @model_validator(mode="before")
    @classmethod
    def fold_foreign_keys(cls, data: Any) -> Any:
        """Resolve each foreign key from its candidate wire names."""
        if not isinstance(data, dict):
            return data
        folded = dict(data)
        for field_name, candidates in FOREIGN_KEY_CANDIDATES.items():
            value = first_present(folded, candidates)
            for key in candidates:
                folded.pop(key, None)
            folded[field_name] = value
        return folded

    @field_validator("documents", mode="before")
    @classmethod
    def default_documents(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("remarks", mode="before")
    @classmethod
    def default_remarks(cls, v: Any) -> Any:
        return "" if v is None else v


class EnrichedClaim(ClaimRecord):
    """Claim joined with its employee, HR assignee and policy."""

    amount: float = 0.0

    employee_name: str = UNKNOWN_EMPLOYEE
    employee_id_display: str = UNKNOWN_EMPLOYEE_CODE
    assigned_hr_name: str = UNASSIGNED_HR
    policy_name: str = UNKNOWN_POLICY

    @field_validator("amount", mode="before")
    @classmethod
    def numeric_amount(cls, v: Any) -> float:
        """Amounts leave the engine as numbers; unparsable becomes 0."""
        return parse_amount(v)


class FraudClaim(EnrichedClaim):
    """Enriched claim pre-flagged by the fraud source."""

    fraud_reason: Optional[str] = None
    fraud_flag: Optional[bool] = None
    title: Optional[str] = None


# ============================================================================
# QUERY RECORDS
# ============================================================================

class QueryRecord(EngineRecord):
    """
    Support query raised by an employee and answered by an agent.

    A Pending query with a non-empty response is a draft awaiting
    submission.
    """

    id: RecordId
    employee_id: Optional[RecordId] = None
    employee_name: str = ""
    query_text: str = ""
    policy_name: str = "-"
    claim_type: str = "-"
    agent_id: Optional[RecordId] = None

    created_at: Timestamp = None
    updated_at: Timestamp = None
    resolved_at: Timestamp = None

    status: QueryStatus = QueryStatus.PENDING
    response: str = ""
    is_editing: bool = False

    @field_validator("response", mode="before")
    @classmethod
    def default_response(cls, v: Any) -> Any:
        return "" if v is None else v

    @model_validator(mode="after")
    def editing_requires_resolved(self) -> "QueryRecord":
        """Editing is a sub-state of Resolved."""
        if self.is_editing and self.status != QueryStatus.RESOLVED:
            raise ValueError("is_editing requires status Resolved")
        return self

    @property
    def is_pending(self) -> bool:
        return self.status == QueryStatus.PENDING

    @property
    def has_draft(self) -> bool:
        return self.is_pending and bool(self.response.strip())


class AssistedClaim(EngineRecord):
    """Claim an agent helped with, derived from a resolved query."""

    id: RecordId
    employee: str
    claim_type: str = Field("-", alias="type")
    policy_name: str = "-"
    date: Timestamp = None
    status: str = "Approved"


# ============================================================================
# AVAILABILITY
# ============================================================================

class AvailabilityRecord(EngineRecord):
    """Agent availability window."""

    agent_id: RecordId
    available: bool = False
    start_time: Timestamp = None
    end_time: Timestamp = None
