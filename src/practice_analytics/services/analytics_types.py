"""
Type definitions for practice analytics calculations.

TypedDicts describe the normalized records the extractor hands to the filters,
calculators and series builders. The pydantic models are the engine's output:
immutable value objects that serialize straight to JSON for the presentation
layer.
"""
from datetime import datetime
from decimal import Decimal
from typing import Literal, NamedTuple, Optional, Tuple, TypedDict, Union

from pydantic import BaseModel, ConfigDict

RecordId = Union[int, str]

# Patient ids are canonical strings so 1 and "1" refer to the same patient
PatientId = str

# Type alias for time-series granularity
BucketUnit = Literal["day", "week", "month"]


class AppointmentItem(TypedDict):
    """
    Normalized appointment (session) record.

    scheduled_from is always present and practice-local; records without a
    parseable start are dropped by the extractor.
    """
    id: Optional[RecordId]
    patient_id: Optional[PatientId]
    patient_name: Optional[str]  # Name carried on the session itself, if any
    status: str  # Lower-cased; unknown statuses are kept and only count toward totals
    scheduled_from: datetime
    scheduled_to: Optional[datetime]
    cost: Optional[Decimal]


class PaymentItem(TypedDict):
    """Normalized payment record."""
    id: Optional[RecordId]
    patient_id: Optional[PatientId]
    status: str
    amount: Decimal  # Never negative; malformed amounts are coerced to 0
    payment_date: datetime


class PatientItem(TypedDict):
    """Normalized patient record."""
    id: Optional[PatientId]
    name: Optional[str]
    status: str
    created_at: datetime


class PeriodSplit(NamedTuple):
    """Records partitioned into the current and the previous period."""
    current: list
    previous: list


class ResolvedPeriod(BaseModel):
    """Concrete calendar boundaries for one analytics request."""
    model_config = ConfigDict(frozen=True)

    range: str  # Named range, or "custom" for explicit bounds
    start: datetime
    end: datetime
    previous_start: datetime
    previous_end: datetime
    bucket_unit: BucketUnit


class StatResult(BaseModel):
    """
    Headline metric with an optional comparison against the previous period.

    delta_percent is None (not infinite, not NaN) when previous_value is 0, so
    "no data to compare" stays distinguishable from "no change".
    """
    model_config = ConfigDict(frozen=True)

    value: Union[int, float]
    previous_value: Optional[Union[int, float]] = None
    delta_percent: Optional[int] = None


class SeriesPoint(BaseModel):
    """Single chart point: chronological for time series, ranked for top-N."""
    model_config = ConfigDict(frozen=True)

    label: str
    value: Union[int, float]


class TodaySummary(BaseModel):
    """Key metrics for the calendar day of the reference date."""
    model_config = ConfigDict(frozen=True)

    date: str  # ISO format date string
    sessions_total: int
    sessions_completed: int
    progress_percent: int
    income_collected: float


class SnapshotStats(BaseModel):
    """Headline metrics of one snapshot, one field per stat."""
    model_config = ConfigDict(frozen=True)

    session_count: StatResult
    completion_rate: StatResult
    cancellation_count: StatResult
    pending_sessions: StatResult
    attendance_rate: StatResult
    active_patients: StatResult
    income_collected: StatResult
    income_pending: StatResult
    collection_rate: StatResult
    new_patients: StatResult


class SnapshotSeries(BaseModel):
    """Chart series of one snapshot; tuples so points cannot be added or removed."""
    model_config = ConfigDict(frozen=True)

    sessions_over_time: Tuple[SeriesPoint, ...]
    income_over_time: Tuple[SeriesPoint, ...]
    pending_income_over_time: Tuple[SeriesPoint, ...]
    session_status_breakdown: Tuple[SeriesPoint, ...]
    payment_status_breakdown: Tuple[SeriesPoint, ...]
    hourly_occupancy: Tuple[SeriesPoint, ...]
    weekday_occupancy: Tuple[SeriesPoint, ...]
    top_patients: Tuple[SeriesPoint, ...]


class Snapshot(BaseModel):
    """Complete result of one aggregation call."""
    model_config = ConfigDict(frozen=True)

    period: ResolvedPeriod
    stats: SnapshotStats
    series: SnapshotSeries
    today: TodaySummary
