"""
Statistics snapshots handed to the chart and export collaborators.

Snapshots are frozen values derived from one collection; they are never
updated, only recomputed.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ChartPoint:
    """One bar or slice of a chart."""

    name: str
    value: float


@dataclass(frozen=True)
class ActivityEntry:
    """Recent-activity line on the admin home screen."""

    id: Any
    action: str
    user: str
    time: datetime | None
    type: str


@dataclass(frozen=True)
class ClaimStats:
    """Claim counts, monetary sums and monthly series."""

    total: int = 0
    pending: int = 0
    resolved: int = 0  # everything that is not Pending
    high_priority: int = 0
    resolved_today: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)

    total_amount: float = 0.0
    pending_amount: float = 0.0
    resolved_amount: float = 0.0

    # Chronological "Jan 2025" labels -> amount
    monthly_amount: dict[str, float] = field(default_factory=dict)
    monthly_saved: dict[str, float] = field(default_factory=dict)
    undated: int = 0

    recent_activity: tuple[ActivityEntry, ...] = ()

    def chart_data(self) -> list[ChartPoint]:
        """Admin home bar chart: Pending / Resolved / High Priority."""
        return [
            ChartPoint("Pending", self.by_status.get("Pending", 0)),
            ChartPoint("Resolved", self.by_status.get("Resolved", 0)),
            ChartPoint("High Priority", self.high_priority),
        ]

    def status_pie(self) -> list[ChartPoint]:
        """Fraud screen pie: Pending vs everything else."""
        return [
            ChartPoint("Pending", self.pending),
            ChartPoint("Resolved", self.resolved),
        ]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class QueryStats:
    """Support query counts, rates and series."""

    total: int = 0
    pending: int = 0
    resolved: int = 0
    response_rate: int = 0  # percent of queries resolved
    pending_rate: int = 0
    avg_response_hours: float = 0.0
    by_day: dict[str, int] = field(default_factory=dict)
    by_type: dict[str, int] = field(default_factory=dict)
    undated: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class UserStats:
    """Directory head counts."""

    total: int = 0
    agents: int = 0
    employees: int = 0
    hr: int = 0
    active: int = 0
    inactive: int = 0
    active_percentage: float = 0.0
    new_today: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
