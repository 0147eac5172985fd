"""
Core engine module for the InsurAI dashboards.

Provides:
- Entity reconciliation of claims, people and policies
- Sorting and filtering of enriched collections
- Query store and optimistic response lifecycle
- Broadcast drafting and agent availability
- Dashboard snapshot loading
"""

from insurai_engine.core.availability import AvailabilityManager
from insurai_engine.core.broadcast import BroadcastResponder, BulkConfirmResult
from insurai_engine.core.lifecycle import QueryConfirmer, QueryLifecycleManager
from insurai_engine.core.reconciler import (
    EntityReconciler,
    derive_assisted_claims,
    merge_directory,
    normalize_queries,
    reconcile,
)
from insurai_engine.core.snapshot import DashboardSnapshot, load_agent_queries, load_snapshot
from insurai_engine.core.sort_filter import (
    ClaimFilter,
    SortFilterEngine,
    SortState,
    matches_status,
)
from insurai_engine.core.state import QueryStore

__all__ = [
    "AvailabilityManager",
    "BroadcastResponder",
    "BulkConfirmResult",
    "QueryConfirmer",
    "QueryLifecycleManager",
    "EntityReconciler",
    "derive_assisted_claims",
    "merge_directory",
    "normalize_queries",
    "reconcile",
    "DashboardSnapshot",
    "load_agent_queries",
    "load_snapshot",
    "ClaimFilter",
    "SortFilterEngine",
    "SortState",
    "matches_status",
    "QueryStore",
]
