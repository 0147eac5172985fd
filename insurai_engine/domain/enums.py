"""
Enumeration types for InsurAI engine domain models.
"""

from enum import Enum


class PersonRole(str, Enum):
    """Directory role of a person."""
    AGENT = "Agent"
    EMPLOYEE = "Employee"
    HR = "HR"


class QueryStatus(str, Enum):
    """Support query status."""
    PENDING = "Pending"
    RESOLVED = "Resolved"


class ClaimStatus(str, Enum):
    """
    Claim statuses the dashboards single out.

    Claim status is free text on the wire; anything that is not Pending
    counts as resolved for fraud totals.
    """
    PENDING = "Pending"
    RESOLVED = "Resolved"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ClaimPriority(str, Enum):
    """Claim priority."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class StatusFilter(str, Enum):
    """Categorical status filter offered by list screens."""
    ALL = "All"
    PENDING = "Pending"
    RESOLVED = "Resolved"


class SortDirection(str, Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"


class ActivityType(str, Enum):
    """Severity tag of a recent-activity entry."""
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"
