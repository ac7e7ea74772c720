"""
Practice analytics services.

The engine consumes already-retrieved appointment, payment and patient
collections and returns an immutable Snapshot of dashboard stats and series.
"""

from practice_analytics.services.analytics_engine import AnalyticsEngine, compute_snapshot
from practice_analytics.services.analytics_filters import filter_by_period
from practice_analytics.services.analytics_period import InvalidRangeError, resolve_period
from practice_analytics.services.analytics_types import (
    ResolvedPeriod,
    SeriesPoint,
    Snapshot,
    SnapshotSeries,
    SnapshotStats,
    StatResult,
    TodaySummary,
)

__all__ = [
    "AnalyticsEngine",
    "compute_snapshot",
    "filter_by_period",
    "resolve_period",
    "InvalidRangeError",
    "ResolvedPeriod",
    "SeriesPoint",
    "Snapshot",
    "SnapshotSeries",
    "SnapshotStats",
    "StatResult",
    "TodaySummary",
]
