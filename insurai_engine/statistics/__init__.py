"""
Dashboard statistics for the InsurAI engine.

Provides claim, query and directory aggregates and their time series.
"""

from insurai_engine.statistics.aggregator import (
    StatisticsAggregator,
    StatsKind,
    percentage,
    recent_activity,
)
from insurai_engine.statistics.series import bucket_by_month, bucket_by_weekday
from insurai_engine.statistics.snapshots import (
    ActivityEntry,
    ChartPoint,
    ClaimStats,
    QueryStats,
    UserStats,
)

__all__ = [
    "StatisticsAggregator",
    "StatsKind",
    "percentage",
    "recent_activity",
    "bucket_by_month",
    "bucket_by_weekday",
    "ActivityEntry",
    "ChartPoint",
    "ClaimStats",
    "QueryStats",
    "UserStats",
]
