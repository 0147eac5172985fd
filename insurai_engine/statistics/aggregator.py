"""
Dashboard statistics for the InsurAI engine.

Derives counts, sums, rates and chart series from claim, query and
directory collections. Every figure is a pure function of the input
collection: parsing defects fall back to 0 or are excluded from buckets,
and empty collections produce all-zero snapshots.
"""

import math
from collections import Counter
from collections.abc import Sequence
from datetime import date
from enum import Enum
from typing import Any, Optional, Union

import numpy as np
import structlog

from insurai_engine.config.models import StatisticsConfig
from insurai_engine.domain.enums import ActivityType, ClaimStatus, PersonRole, QueryStatus
from insurai_engine.domain.records import record_value
from insurai_engine.statistics.series import bucket_by_month, bucket_by_weekday
from insurai_engine.statistics.snapshots import (
    ActivityEntry,
    ClaimStats,
    QueryStats,
    UserStats,
)
from insurai_engine.utils.parsing import parse_amount, parse_timestamp


logger = structlog.get_logger()

Stats = Union[ClaimStats, QueryStats, UserStats]


class StatsKind(str, Enum):
    """Collection kinds the aggregator understands."""
    CLAIMS = "claims"
    QUERIES = "queries"
    USERS = "users"


def percentage(part: int, total: int) -> int:
    """Whole percent, rounding halves up; 0 when total is 0."""
    if total <= 0:
        return 0
    return math.floor(part * 100 / total + 0.5)


def _status_of(record: Any) -> str:
    status = record_value(record, "status")
    return status.value if isinstance(status, Enum) else str(status or "")


def _same_day(raw: Any, today: date) -> bool:
    moment = parse_timestamp(raw)
    return moment is not None and moment.date() == today


class StatisticsAggregator:
    """
    Computes statistics snapshots.

    Results are remembered per kind only for tuple inputs (immutable
    snapshots), matched by identity. A new collection, even with equal
    content, is always recomputed.

    Usage:
        aggregator = StatisticsAggregator()
        claim_stats = aggregator.aggregate_claims(enriched_claims)
        query_stats = aggregator.aggregate_queries(store.queries)
    """

    def __init__(self, config: Optional[StatisticsConfig] = None):
        self.config = config or StatisticsConfig()
        self._memo: dict[StatsKind, tuple[Any, date, Stats]] = {}

    def aggregate(
        self,
        items: Sequence,
        kind: StatsKind | str,
        today: Optional[date] = None,
    ) -> Stats:
        """
        Aggregate a collection of the given kind.

        Args:
            items: Claims, queries or people
            kind: Which collection this is
            today: Reference day for "today" counters (defaults to date.today())

        Returns:
            ClaimStats, QueryStats or UserStats
        """
        kind = StatsKind(kind)
        today = today or date.today()

        cached = self._memo.get(kind)
        if cached is not None and cached[0] is items and cached[1] == today:
            return cached[2]

        if kind == StatsKind.CLAIMS:
            result: Stats = self._claim_stats(items, today)
        elif kind == StatsKind.QUERIES:
            result = self._query_stats(items)
        else:
            result = self._user_stats(items, today)

        if isinstance(items, tuple):
            self._memo[kind] = (items, today, result)
        return result

    def aggregate_claims(self, claims: Sequence, today: Optional[date] = None) -> ClaimStats:
        return self.aggregate(claims, StatsKind.CLAIMS, today)

    def aggregate_queries(self, queries: Sequence) -> QueryStats:
        return self.aggregate(queries, StatsKind.QUERIES)

    def aggregate_users(self, users: Sequence, today: Optional[date] = None) -> UserStats:
        return self.aggregate(users, StatsKind.USERS, today)

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    def _claim_stats(self, claims: Sequence, today: date) -> ClaimStats:
        total = len(claims)
        if total == 0:
            return ClaimStats()

        statuses = [_status_of(c) for c in claims]
        priorities = [str(record_value(c, "priority") or "") for c in claims]
        amounts = np.fromiter(
            (parse_amount(record_value(c, "amount")) for c in claims),
            dtype=float,
            count=total,
        )
        pending_mask = np.fromiter(
            (s == ClaimStatus.PENDING.value for s in statuses),
            dtype=bool,
            count=total,
        )

        pending = int(pending_mask.sum())
        total_amount = float(amounts.sum())
        pending_amount = float(amounts[pending_mask].sum())

        amount_by_index = dict(enumerate(amounts.tolist()))
        indexed = list(enumerate(claims))
        monthly_amount, undated = bucket_by_month(
            indexed,
            timestamp_of=lambda pair: record_value(pair[1], "claimDate"),
            value_of=lambda pair: amount_by_index[pair[0]],
        )
        monthly_saved, _ = bucket_by_month(
            indexed,
            timestamp_of=lambda pair: record_value(pair[1], "claimDate"),
            value_of=lambda pair: 0.0 if pending_mask[pair[0]] else amount_by_index[pair[0]],
        )

        resolved_today = sum(
            1
            for c, status in zip(claims, statuses)
            if status == ClaimStatus.RESOLVED.value
            and _same_day(record_value(c, "updatedAt"), today)
        )

        return ClaimStats(
            total=total,
            pending=pending,
            resolved=total - pending,
            high_priority=sum(1 for p in priorities if p == self.config.high_priority_label),
            resolved_today=resolved_today,
            by_status=dict(Counter(statuses)),
            by_priority=dict(Counter(p for p in priorities if p)),
            total_amount=total_amount,
            pending_amount=pending_amount,
            # Derived by subtraction so pending + resolved == total exactly
            resolved_amount=total_amount - pending_amount,
            monthly_amount=monthly_amount,
            monthly_saved=monthly_saved,
            undated=undated,
            recent_activity=tuple(recent_activity(claims, self.config.recent_activity_limit)),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _query_stats(self, queries: Sequence) -> QueryStats:
        total = len(queries)
        if total == 0:
            return QueryStats(by_day=bucket_by_weekday(())[0])

        statuses = [_status_of(q) for q in queries]
        pending = sum(1 for s in statuses if s == QueryStatus.PENDING.value)
        resolved = sum(1 for s in statuses if s == QueryStatus.RESOLVED.value)

        by_day, undated = bucket_by_weekday(record_value(q, "createdAt") for q in queries)
        by_type = dict(
            Counter(str(record_value(q, "claimType") or "General") for q in queries)
        )

        hours: list[float] = []
        for query, status in zip(queries, statuses):
            if status != QueryStatus.RESOLVED.value:
                continue
            finished_raw = record_value(query, "resolvedAt") or record_value(query, "updatedAt")
            created = parse_timestamp(record_value(query, "createdAt"))
            finished = parse_timestamp(finished_raw)
            if created is None or finished is None:
                continue
            hours.append((finished - created).total_seconds() / 3600)

        return QueryStats(
            total=total,
            pending=pending,
            resolved=resolved,
            response_rate=percentage(resolved, total),
            pending_rate=percentage(pending, total),
            avg_response_hours=float(np.mean(hours)) if hours else 0.0,
            by_day=by_day,
            by_type=by_type,
            undated=undated,
        )

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def _user_stats(self, users: Sequence, today: date) -> UserStats:
        total = len(users)
        if total == 0:
            return UserStats()

        roles = Counter(_role_of(u) for u in users)
        active = sum(1 for u in users if record_value(u, "active"))

        return UserStats(
            total=total,
            agents=roles.get(PersonRole.AGENT.value, 0),
            employees=roles.get(PersonRole.EMPLOYEE.value, 0),
            hr=roles.get(PersonRole.HR.value, 0),
            active=active,
            inactive=total - active,
            active_percentage=active * 100 / total,
            new_today=sum(1 for u in users if _same_day(record_value(u, "createdAt"), today)),
        )


def _role_of(person: Any) -> str:
    role = record_value(person, "role")
    return role.value if isinstance(role, Enum) else str(role or "")


def recent_activity(claims: Sequence, limit: int = 5) -> list[ActivityEntry]:
    """
    The last `limit` claims in collection order, newest first.

    Args:
        claims: Enriched claims
        limit: Number of entries

    Returns:
        Activity entries for the admin home screen
    """
    entries = []
    for claim in reversed(list(claims)[-limit:]):
        status = _status_of(claim)
        if status == ClaimStatus.PENDING.value:
            kind = ActivityType.WARNING
        elif status == ClaimStatus.RESOLVED.value:
            kind = ActivityType.SUCCESS
        else:
            kind = ActivityType.INFO
        entries.append(
            ActivityEntry(
                id=record_value(claim, "id"),
                action=f"Claim by {record_value(claim, 'employeeName')}",
                user=f"Policy: {record_value(claim, 'policyName')}",
                time=parse_timestamp(record_value(claim, "createdAt")),
                type=kind.value,
            )
        )
    return entries
