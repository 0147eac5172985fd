"""
Domain models for the InsurAI engine.

Pydantic records for people, policies, claims and support queries, plus the
engine's error hierarchy.
"""

from insurai_engine.domain.enums import (
    ActivityType,
    ClaimPriority,
    ClaimStatus,
    PersonRole,
    QueryStatus,
    SortDirection,
    StatusFilter,
)
from insurai_engine.domain.errors import (
    AuthenticationMissing,
    EngineError,
    InvalidTransitionError,
    QueryNotFoundError,
    ReconciliationError,
    RemoteConfirmationError,
    TransportError,
    ValidationError,
)
from insurai_engine.domain.records import (
    FOREIGN_KEY_CANDIDATES,
    UNASSIGNED_HR,
    UNKNOWN_EMPLOYEE,
    UNKNOWN_EMPLOYEE_CODE,
    UNKNOWN_POLICY,
    AssistedClaim,
    AvailabilityRecord,
    ClaimRecord,
    EnrichedClaim,
    FraudClaim,
    PersonRecord,
    PolicyRecord,
    QueryRecord,
    record_value,
)

__all__ = [
    # Enums
    "ActivityType",
    "ClaimPriority",
    "ClaimStatus",
    "PersonRole",
    "QueryStatus",
    "SortDirection",
    "StatusFilter",
    # Errors
    "AuthenticationMissing",
    "EngineError",
    "InvalidTransitionError",
    "QueryNotFoundError",
    "ReconciliationError",
    "RemoteConfirmationError",
    "TransportError",
    "ValidationError",
    # Records
    "FOREIGN_KEY_CANDIDATES",
    "UNASSIGNED_HR",
    "UNKNOWN_EMPLOYEE",
    "UNKNOWN_EMPLOYEE_CODE",
    "UNKNOWN_POLICY",
    "AssistedClaim",
    "AvailabilityRecord",
    "ClaimRecord",
    "EnrichedClaim",
    "FraudClaim",
    "PersonRecord",
    "PolicyRecord",
    "QueryRecord",
    "record_value",
]
