"""
Stat calculators for analytics calculations.

Each calculator is responsible for computing one headline metric from the
current-period items and comparing it against the previous period, following
the single responsibility principle for better testability and maintainability.
"""
from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Dict, List, Optional, Sequence, Set, Type, Union

from practice_analytics.core.constants import OUTSTANDING_PAYMENT_STATUSES
from practice_analytics.services.analytics_types import (
    AppointmentItem,
    PatientId,
    PatientItem,
    PaymentItem,
    StatResult,
)

Number = Union[int, float, Decimal]

MONEY_QUANTUM = Decimal("0.01")
UNIT_QUANTUM = Decimal("1")


def quantize_half_up(value: Decimal, quantum: Decimal) -> Decimal:
    """
    Quantize half-up with enough precision for the result's digit count.

    The default 28-digit context rejects large amounts with InvalidOperation,
    so the precision is widened to fit the value.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() - quantum.adjusted() + 2)
        return value.quantize(quantum, rounding=ROUND_HALF_UP)


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(quantize_half_up(Decimal(str(value)), UNIT_QUANTUM))


def percentage(part: Number, whole: Number) -> int:
    """
    Rounded percentage of part over whole.

    Returns 0 when whole is 0, never raising or producing NaN.
    """
    if not whole:
        return 0
    return round_half_up(Decimal(str(part)) * 100 / Decimal(str(whole)))


def delta_percent(current: Number, previous: Optional[Number]) -> Optional[int]:
    """
    Percentage change of current versus previous.

    Returns None when there is no previous value or it is 0, so an infinite
    swing is never reported.
    """
    if previous is None or not previous:
        return None
    current_d = Decimal(str(current))
    previous_d = Decimal(str(previous))
    return round_half_up((current_d - previous_d) / previous_d * 100)


def money_to_float(value: Number) -> float:
    """Quantize a money amount to cents (half-up) and convert it for JSON."""
    return float(quantize_half_up(Decimal(value), MONEY_QUANTUM))


def _plain(value: Number) -> Union[int, float]:
    """Decimal money becomes a 2-place float for JSON; counts stay ints."""
    if isinstance(value, Decimal):
        return money_to_float(value)
    return value


def build_stat(value: Number, previous_value: Optional[Number] = None) -> StatResult:
    """Assemble a StatResult with its delta against the previous value."""
    return StatResult(
        value=_plain(value),
        previous_value=_plain(previous_value) if previous_value is not None else None,
        delta_percent=delta_percent(value, previous_value),
    )


def _count_status(items: Sequence[AppointmentItem], *statuses: str) -> int:
    return sum(1 for item in items if item['status'] in statuses)


def _sum_amounts(items: Sequence[PaymentItem], *statuses: str) -> Decimal:
    total = Decimal("0")
    for item in items:
        if item['status'] in statuses:
            total += item['amount']
    return total


class StatCalculator(ABC):
    """
    Base class for headline metric calculators.

    Subclasses implement measure(); calculate() applies it to both periods and
    derives the delta.
    """

    @staticmethod
    @abstractmethod
    def measure(items: Sequence) -> Number:
        """Metric value for one period's items."""

    @classmethod
    def calculate(cls, current: Sequence, previous: Optional[Sequence] = None) -> StatResult:
        """
        Calculate the metric for the current period.

        Args:
            current: Items inside the current period
            previous: Items inside the previous period, or None to skip the comparison

        Returns:
            StatResult with value, previous_value and delta_percent
        """
        value = cls.measure(current)
        previous_value = cls.measure(previous) if previous is not None else None
        return build_stat(value, previous_value)


class SessionCountCalculator(StatCalculator):
    """Appointments in the period, any status."""

    @staticmethod
    def measure(items: Sequence[AppointmentItem]) -> int:
        return len(items)


class CompletionRateCalculator(StatCalculator):
    """Completed appointments as a rounded percentage of all appointments."""

    @staticmethod
    def measure(items: Sequence[AppointmentItem]) -> int:
        return percentage(_count_status(items, "completed"), len(items))


class CancellationCountCalculator(StatCalculator):
    """Cancelled appointments (shown as a subtitle, not a percentage)."""

    @staticmethod
    def measure(items: Sequence[AppointmentItem]) -> int:
        return _count_status(items, "cancelled")


class PendingSessionsCalculator(StatCalculator):
    """Appointments still ahead: pending or confirmed."""

    @staticmethod
    def measure(items: Sequence[AppointmentItem]) -> int:
        return _count_status(items, "pending", "confirmed")


class AttendanceRateCalculator(StatCalculator):
    """Completed plus confirmed appointments as a rounded percentage of all appointments."""

    @staticmethod
    def measure(items: Sequence[AppointmentItem]) -> int:
        return percentage(_count_status(items, "completed", "confirmed"), len(items))


class IncomeCollectedCalculator(StatCalculator):
    """Sum of paid payment amounts."""

    @staticmethod
    def measure(items: Sequence[PaymentItem]) -> Decimal:
        return _sum_amounts(items, "paid")


class IncomePendingCalculator(StatCalculator):
    """Sum of pending and overdue payment amounts."""

    @staticmethod
    def measure(items: Sequence[PaymentItem]) -> Decimal:
        return _sum_amounts(items, *OUTSTANDING_PAYMENT_STATUSES)


class CollectionRateCalculator(StatCalculator):
    """Collected amount as a rounded percentage of collected plus outstanding amounts."""

    @staticmethod
    def measure(items: Sequence[PaymentItem]) -> int:
        collected = _sum_amounts(items, "paid")
        billed = collected + _sum_amounts(items, *OUTSTANDING_PAYMENT_STATUSES)
        return percentage(collected, billed)


class ActivePatientsCalculator(StatCalculator):
    """Distinct patients seen in the period's appointments, not the whole roster."""

    @staticmethod
    def measure(items: Sequence[AppointmentItem]) -> int:
        patient_ids: Set[PatientId] = set()
        for item in items:
            patient_id = item.get('patient_id')
            if patient_id is not None:
                patient_ids.add(patient_id)
        return len(patient_ids)


class NewPatientsCalculator(StatCalculator):
    """Patients created in the period."""

    @staticmethod
    def measure(items: Sequence[PatientItem]) -> int:
        return len(items)


# Stat name -> calculator, grouped by the entity kind each one consumes
APPOINTMENT_STATS: Dict[str, Type[StatCalculator]] = {
    'session_count': SessionCountCalculator,
    'completion_rate': CompletionRateCalculator,
    'cancellation_count': CancellationCountCalculator,
    'pending_sessions': PendingSessionsCalculator,
    'attendance_rate': AttendanceRateCalculator,
    'active_patients': ActivePatientsCalculator,
}

PAYMENT_STATS: Dict[str, Type[StatCalculator]] = {
    'income_collected': IncomeCollectedCalculator,
    'income_pending': IncomePendingCalculator,
    'collection_rate': CollectionRateCalculator,
}

PATIENT_STATS: Dict[str, Type[StatCalculator]] = {
    'new_patients': NewPatientsCalculator,
}

STAT_NAMES: List[str] = [*APPOINTMENT_STATS, *PAYMENT_STATS, *PATIENT_STATS]
