"""
Series builders for analytics charts.

Each builder turns current-period items into a uniform list of SeriesPoint
objects ready for plotting. Builders are pure and share no state, so they can
be evaluated in any order.
"""
from collections import Counter, defaultdict
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from practice_analytics.core.constants import (
    APPOINTMENT_STATUSES,
    HOURS_PER_DAY,
    OUTSTANDING_PAYMENT_STATUSES,
    PAYMENT_STATUSES,
    WEEKDAY_LABELS,
)
from practice_analytics.services.analytics_calculators import money_to_float
from practice_analytics.services.analytics_extractor import normalize_patient_id
from practice_analytics.services.analytics_period import bucket_key, bucket_keys
from practice_analytics.services.analytics_types import (
    AppointmentItem,
    PatientId,
    PaymentItem,
    ResolvedPeriod,
    SeriesPoint,
)


class TimeSeriesBuilder:
    """
    Builds chronological series bucketed by the period's bucket_unit.

    Every bucket implied by the period is emitted, zero-filled when empty, so
    charts show continuous gaps instead of missing categories. Labels are the
    ISO date of each bucket's start.
    """

    @staticmethod
    def _bucketed(
        period: ResolvedPeriod,
        items: Iterable[Any],
        moment_of: Callable[[Any], Any],
        weight_of: Callable[[Any], Any],
    ) -> List[Tuple[date, Any]]:
        keys = bucket_keys(period)
        totals: Dict[date, Any] = {key: 0 for key in keys}

        for item in items:
            key = bucket_key(moment_of(item).date(), period.bucket_unit)
            if key in totals:
                totals[key] += weight_of(item)

        return [(key, totals[key]) for key in keys]

    @staticmethod
    def sessions_over_time(
        items: Sequence[AppointmentItem],
        period: ResolvedPeriod
    ) -> List[SeriesPoint]:
        """Appointment count per bucket."""
        buckets = TimeSeriesBuilder._bucketed(
            period, items,
            moment_of=lambda item: item['scheduled_from'],
            weight_of=lambda item: 1,
        )
        return [SeriesPoint(label=key.isoformat(), value=count) for key, count in buckets]

    @staticmethod
    def income_over_time(
        items: Sequence[PaymentItem],
        period: ResolvedPeriod,
        statuses: Tuple[str, ...] = ("paid",)
    ) -> List[SeriesPoint]:
        """
        Summed payment amount per bucket.

        Args:
            items: Current-period payments
            period: Resolved period (drives bucket unit and count)
            statuses: Payment statuses to include, paid by default
        """
        matching = [item for item in items if item['status'] in statuses]
        buckets = TimeSeriesBuilder._bucketed(
            period, matching,
            moment_of=lambda item: item['payment_date'],
            weight_of=lambda item: item['amount'],
        )
        return [
            SeriesPoint(label=key.isoformat(), value=money_to_float(total))
            for key, total in buckets
        ]

    @staticmethod
    def pending_income_over_time(
        items: Sequence[PaymentItem],
        period: ResolvedPeriod
    ) -> List[SeriesPoint]:
        """Summed pending and overdue amounts per bucket."""
        return TimeSeriesBuilder.income_over_time(items, period, OUTSTANDING_PAYMENT_STATUSES)


class StatusBreakdownBuilder:
    """Builds pie-chart data over a fixed status taxonomy."""

    @staticmethod
    def build(items: Sequence[Any], statuses: Sequence[str]) -> List[SeriesPoint]:
        """
        Count items per status.

        Every status in the taxonomy is emitted, zero counts included, so the
        legend stays stable across periods. Items with statuses outside the
        taxonomy are not counted.
        """
        counts = Counter(item['status'] for item in items)
        return [SeriesPoint(label=status, value=counts.get(status, 0)) for status in statuses]

    @staticmethod
    def sessions(items: Sequence[AppointmentItem]) -> List[SeriesPoint]:
        return StatusBreakdownBuilder.build(items, APPOINTMENT_STATUSES)

    @staticmethod
    def payments(items: Sequence[PaymentItem]) -> List[SeriesPoint]:
        return StatusBreakdownBuilder.build(items, PAYMENT_STATUSES)


class OccupancyBuilder:
    """Builds hour-of-day and day-of-week occupancy histograms."""

    @staticmethod
    def hourly(items: Sequence[AppointmentItem]) -> List[SeriesPoint]:
        """24 buckets (0-23) counting appointments by local start hour."""
        counts = Counter(item['scheduled_from'].hour for item in items)
        return [SeriesPoint(label=str(hour), value=counts.get(hour, 0)) for hour in range(HOURS_PER_DAY)]

    @staticmethod
    def weekday(items: Sequence[AppointmentItem]) -> List[SeriesPoint]:
        """
        7 buckets Sunday through Saturday counting appointments by local start weekday.

        Display order is Sunday-first regardless of the Monday-start weeks used
        for periods.
        """
        # datetime.weekday(): Monday=0 ... Sunday=6; shift so Sunday=0
        counts = Counter((item['scheduled_from'].weekday() + 1) % 7 for item in items)
        return [SeriesPoint(label=label, value=counts.get(index, 0)) for index, label in enumerate(WEEKDAY_LABELS)]


def _id_sort_key(patient_id: PatientId) -> Tuple[int, int, str]:
    """Numeric ids sort numerically and before other ids, which sort as text."""
    if patient_id.isdecimal():
        return (0, int(patient_id), patient_id)
    return (1, 0, patient_id)


class TopPatientsBuilder:
    """Ranks patients by appointment count."""

    @staticmethod
    def build(
        items: Sequence[AppointmentItem],
        limit: int,
        names: Optional[Mapping[PatientId, str]] = None
    ) -> List[SeriesPoint]:
        """
        Top patients by number of appointments in the period.

        Sorted by count descending, ties broken by patient id ascending, so the
        order is deterministic across calls. Appointments without a patient are
        ignored.

        Args:
            items: Current-period appointments
            limit: Maximum number of patients to return
            names: Patient id -> display name from the patient roster

        Returns:
            At most `limit` SeriesPoints labelled with the patient's name; the
            roster name wins over a name carried on the session, and the id is
            used when neither is known
        """
        if limit <= 0:
            return []

        names = names or {}
        counts: Dict[PatientId, int] = defaultdict(int)
        session_names: Dict[PatientId, str] = {}
        for item in items:
            patient_id = normalize_patient_id(item.get('patient_id'))
            if patient_id is None:
                continue
            counts[patient_id] += 1
            if item.get('patient_name') and patient_id not in session_names:
                session_names[patient_id] = item['patient_name']

        ranked = sorted(counts.items(), key=lambda entry: (-entry[1], _id_sort_key(entry[0])))
        return [
            SeriesPoint(
                label=names.get(patient_id) or session_names.get(patient_id) or patient_id,
                value=count,
            )
            for patient_id, count in ranked[:limit]
        ]
