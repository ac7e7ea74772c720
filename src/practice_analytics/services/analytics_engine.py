"""
Calculation engine for practice analytics.

Orchestrates period resolution, record extraction, period filtering, stat
calculators and series builders into one immutable Snapshot.
"""
from datetime import date, tzinfo
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from practice_analytics.core.config import ANALYTICS_DEFAULT_TOP_PATIENTS
from practice_analytics.core.constants import NAMED_RANGES
from practice_analytics.services.analytics_calculators import (
    APPOINTMENT_STATS,
    money_to_float,
    PATIENT_STATS,
    PAYMENT_STATS,
    percentage,
)
from practice_analytics.services.analytics_extractor import RecordExtractor, read_field
from practice_analytics.services.analytics_filters import PeriodFilter
from practice_analytics.services.analytics_period import InvalidRangeError, PeriodResolver
from practice_analytics.services.analytics_series import (
    OccupancyBuilder,
    StatusBreakdownBuilder,
    TimeSeriesBuilder,
    TopPatientsBuilder,
)
from practice_analytics.services.analytics_types import (
    AppointmentItem,
    PaymentItem,
    SeriesPoint,
    Snapshot,
    SnapshotSeries,
    SnapshotStats,
    StatResult,
    TodaySummary,
)
from practice_analytics.utils.datetime_utils import ANALYTICS_TZ, parse_timestamp

logger = logging.getLogger(__name__)


class AnalyticsEngine:
    """
    Orchestrates practice analytics calculations.

    This engine coordinates:
    1. Period resolution (current, previous, bucket unit)
    2. Record extraction from raw appointments, payments and patients
    3. Period filtering per entity kind
    4. Stat calculation and series building

    The engine holds no per-call state; one instance can serve any number of
    calls.
    """

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz or ANALYTICS_TZ
        self.resolver = PeriodResolver()
        self.extractor = RecordExtractor()
        self.period_filter = PeriodFilter()

    def compute(
        self,
        records: Any,
        time_range: Any,
        reference_date: Any,
        top_patients_limit: Optional[int] = None
    ) -> Snapshot:
        """
        Compute the full dashboard snapshot.

        Args:
            records: Mapping or object with appointments, payments and patients
                collections (any may be missing or empty)
            time_range: Named range or explicit {from, to} bounds
            reference_date: The "now" for named ranges and the today summary
            top_patients_limit: Number of top patients to rank, defaults to
                ANALYTICS_DEFAULT_TOP_PATIENTS

        Returns:
            Snapshot with stats, series, today summary and the resolved period

        Raises:
            InvalidRangeError: If the period cannot be resolved
        """
        period = self.resolver.resolve(time_range, reference_date, self.tz)

        reference = parse_timestamp(reference_date, self.tz)
        if reference is None:
            if period.range in NAMED_RANGES:
                raise InvalidRangeError(f"Invalid reference date: {reference_date!r}")
            reference = period.end

        limit = ANALYTICS_DEFAULT_TOP_PATIENTS if top_patients_limit is None else max(0, top_patients_limit)

        appointments = self.extractor.extract_appointments(read_field(records, "appointments"), self.tz)
        payments = self.extractor.extract_payments(read_field(records, "payments"), self.tz)
        raw_patients = read_field(records, "patients")
        patients = self.extractor.extract_patients(raw_patients, self.tz)

        appointment_split = self.period_filter.split(appointments, period, 'scheduled_from', self.tz)
        payment_split = self.period_filter.split(payments, period, 'payment_date', self.tz)
        patient_split = self.period_filter.split(patients, period, 'created_at', self.tz)

        logger.debug(
            f"Computing {period.range} snapshot {period.start} - {period.end}: "
            f"{len(appointment_split.current)} appointments, "
            f"{len(payment_split.current)} payments, "
            f"{len(patient_split.current)} new patients in period"
        )

        stats: Dict[str, StatResult] = {}
        for name, calculator in APPOINTMENT_STATS.items():
            stats[name] = calculator.calculate(appointment_split.current, appointment_split.previous)
        for name, calculator in PAYMENT_STATS.items():
            stats[name] = calculator.calculate(payment_split.current, payment_split.previous)
        for name, calculator in PATIENT_STATS.items():
            stats[name] = calculator.calculate(patient_split.current, patient_split.previous)

        current_appointments = appointment_split.current
        current_payments = payment_split.current
        series: Dict[str, List[SeriesPoint]] = {
            'sessions_over_time': TimeSeriesBuilder.sessions_over_time(current_appointments, period),
            'income_over_time': TimeSeriesBuilder.income_over_time(current_payments, period),
            'pending_income_over_time': TimeSeriesBuilder.pending_income_over_time(current_payments, period),
            'session_status_breakdown': StatusBreakdownBuilder.sessions(current_appointments),
            'payment_status_breakdown': StatusBreakdownBuilder.payments(current_payments),
            'hourly_occupancy': OccupancyBuilder.hourly(current_appointments),
            'weekday_occupancy': OccupancyBuilder.weekday(current_appointments),
            'top_patients': TopPatientsBuilder.build(
                current_appointments, limit, self.extractor.patient_names(raw_patients)
            ),
        }

        return Snapshot(
            period=period,
            stats=SnapshotStats(**stats),
            series=SnapshotSeries(**series),
            today=self._today_summary(appointments, payments, reference.date()),
        )

    @staticmethod
    def _today_summary(
        appointments: List[AppointmentItem],
        payments: List[PaymentItem],
        day: date
    ) -> TodaySummary:
        """Sessions and collected income for a single calendar day."""
        todays_sessions = [item for item in appointments if item['scheduled_from'].date() == day]
        completed = sum(1 for item in todays_sessions if item['status'] == 'completed')

        income = Decimal("0")
        for item in payments:
            if item['status'] == 'paid' and item['payment_date'].date() == day:
                income += item['amount']

        return TodaySummary(
            date=day.isoformat(),
            sessions_total=len(todays_sessions),
            sessions_completed=completed,
            progress_percent=percentage(completed, len(todays_sessions)),
            income_collected=money_to_float(income),
        )


def compute_snapshot(
    records: Any,
    time_range: Any,
    reference_date: Any,
    top_patients_limit: Optional[int] = None,
    tz: Optional[tzinfo] = None
) -> Snapshot:
    """Compute a dashboard snapshot; see AnalyticsEngine.compute."""
    return AnalyticsEngine(tz).compute(records, time_range, reference_date, top_patients_limit)
