"""
Unit tests for analytics series builders.
"""
from datetime import date, datetime, timezone
from decimal import Decimal

from practice_analytics.services.analytics_period import resolve_period
from practice_analytics.services.analytics_series import (
    OccupancyBuilder,
    StatusBreakdownBuilder,
    TimeSeriesBuilder,
    TopPatientsBuilder,
)
from practice_analytics.services.analytics_types import AppointmentItem, PaymentItem

UTC = timezone.utc


def appointment(when: datetime, status: str = "completed", patient_id=1, patient_name=None) -> AppointmentItem:
    return AppointmentItem(
        id=None, patient_id=patient_id, patient_name=patient_name, status=status,
        scheduled_from=when, scheduled_to=None, cost=None,
    )


def payment(when: datetime, amount, status: str = "paid") -> PaymentItem:
    return PaymentItem(id=None, patient_id=1, status=status, amount=Decimal(str(amount)), payment_date=when)


def as_pairs(points):
    return [(point.label, point.value) for point in points]


class TestTimeSeries:
    """Test bucketed time series."""

    def test_daily_buckets_are_zero_filled(self):
        period = resolve_period("week", date(2024, 3, 15), UTC)
        items = [
            appointment(datetime(2024, 3, 11, 9, 0, tzinfo=UTC)),
            appointment(datetime(2024, 3, 11, 15, 0, tzinfo=UTC)),
            appointment(datetime(2024, 3, 14, 9, 0, tzinfo=UTC)),
        ]

        series = TimeSeriesBuilder.sessions_over_time(items, period)

        assert as_pairs(series) == [
            ("2024-03-11", 2), ("2024-03-12", 0), ("2024-03-13", 0), ("2024-03-14", 1),
            ("2024-03-15", 0), ("2024-03-16", 0), ("2024-03-17", 0),
        ]

    def test_empty_month_still_has_every_day(self):
        period = resolve_period("month", date(2024, 2, 10), UTC)

        series = TimeSeriesBuilder.sessions_over_time([], period)

        assert len(series) == 29
        assert all(point.value == 0 for point in series)
        assert series[0].label == "2024-02-01"
        assert series[-1].label == "2024-02-29"

    def test_weekly_buckets(self):
        period = resolve_period("quarter", date(2024, 2, 15), UTC)
        items = [
            appointment(datetime(2024, 1, 3, 9, 0, tzinfo=UTC)),
            appointment(datetime(2024, 1, 7, 9, 0, tzinfo=UTC)),
            appointment(datetime(2024, 1, 8, 9, 0, tzinfo=UTC)),
        ]

        series = TimeSeriesBuilder.sessions_over_time(items, period)

        assert len(series) == 13
        assert as_pairs(series[:2]) == [("2024-01-01", 2), ("2024-01-08", 1)]

    def test_monthly_income_buckets(self):
        period = resolve_period("year", date(2024, 6, 1), UTC)
        items = [
            payment(datetime(2024, 1, 15, tzinfo=UTC), 1000),
            payment(datetime(2024, 1, 31, tzinfo=UTC), "250.25"),
            payment(datetime(2024, 3, 2, tzinfo=UTC), 500),
            payment(datetime(2024, 3, 2, tzinfo=UTC), 9999, status="pending"),
        ]

        series = TimeSeriesBuilder.income_over_time(items, period)

        assert len(series) == 12
        assert series[0].label == "2024-01-01"
        assert series[0].value == 1250.25
        assert series[1].value == 0
        assert series[2].value == 500.0

    def test_pending_income_series(self):
        period = resolve_period("week", date(2024, 3, 15), UTC)
        items = [
            payment(datetime(2024, 3, 12, tzinfo=UTC), 300, status="pending"),
            payment(datetime(2024, 3, 12, tzinfo=UTC), 200, status="overdue"),
            payment(datetime(2024, 3, 12, tzinfo=UTC), 1000, status="paid"),
        ]

        series = TimeSeriesBuilder.pending_income_over_time(items, period)

        assert series[1].label == "2024-03-12"
        assert series[1].value == 500.0
        assert sum(point.value for point in series) == 500.0


class TestStatusBreakdown:
    """Test status breakdown series."""

    def test_all_session_statuses_emitted_in_order(self):
        items = [
            appointment(datetime(2024, 3, 1, tzinfo=UTC), "completed"),
            appointment(datetime(2024, 3, 2, tzinfo=UTC), "completed"),
            appointment(datetime(2024, 3, 3, tzinfo=UTC), "cancelled"),
            appointment(datetime(2024, 3, 4, tzinfo=UTC), "rescheduled"),
        ]

        assert as_pairs(StatusBreakdownBuilder.sessions(items)) == [
            ("pending", 0), ("confirmed", 0), ("completed", 2), ("cancelled", 1),
        ]

    def test_payment_statuses_with_no_items(self):
        assert as_pairs(StatusBreakdownBuilder.payments([])) == [
            ("pending", 0), ("paid", 0), ("overdue", 0),
        ]


class TestOccupancy:
    """Test hour-of-day and day-of-week histograms."""

    def test_hourly_has_24_buckets(self):
        items = [
            appointment(datetime(2024, 3, 4, 0, 15, tzinfo=UTC)),
            appointment(datetime(2024, 3, 4, 23, 45, tzinfo=UTC)),
            appointment(datetime(2024, 3, 5, 23, 0, tzinfo=UTC)),
        ]

        series = OccupancyBuilder.hourly(items)

        assert [point.label for point in series] == [str(hour) for hour in range(24)]
        assert series[0].value == 1
        assert series[23].value == 2
        assert sum(point.value for point in series) == 3

    def test_weekday_is_sunday_first(self):
        items = [
            appointment(datetime(2024, 3, 17, 9, 0, tzinfo=UTC)),  # Sunday
            appointment(datetime(2024, 3, 18, 9, 0, tzinfo=UTC)),  # Monday
            appointment(datetime(2024, 3, 23, 9, 0, tzinfo=UTC)),  # Saturday
            appointment(datetime(2024, 3, 24, 9, 0, tzinfo=UTC)),  # Sunday
        ]

        assert as_pairs(OccupancyBuilder.weekday(items)) == [
            ("sun", 2), ("mon", 1), ("tue", 0), ("wed", 0), ("thu", 0), ("fri", 0), ("sat", 1),
        ]


class TestTopPatients:
    """Test top patients ranking."""

    def test_ties_broken_by_patient_id(self):
        items = (
            [appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id="p2")] * 3
            + [appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id="p1")] * 3
            + [appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id="p3")] * 1
        )

        result = TopPatientsBuilder.build(items, 2)

        assert as_pairs(result) == [("p1", 3), ("p2", 3)]

    def test_numeric_ids_sort_numerically_before_strings(self):
        items = [
            appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id=10),
            appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id=9),
            appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id="a"),
        ]

        assert [point.label for point in TopPatientsBuilder.build(items, 5)] == ["9", "10", "a"]

    def test_limit_larger_than_population(self):
        items = [appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id=1)]
        assert as_pairs(TopPatientsBuilder.build(items, 5)) == [("1", 1)]

    def test_zero_or_negative_limit(self):
        items = [appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id=1)]
        assert TopPatientsBuilder.build(items, 0) == []
        assert TopPatientsBuilder.build(items, -3) == []

    def test_appointments_without_patient_are_ignored(self):
        items = [
            appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id=None),
            appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id=None),
            appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id=4),
        ]

        assert as_pairs(TopPatientsBuilder.build(items, 5)) == [("4", 1)]

    def test_mixed_id_types_count_as_one_patient(self):
        items = [
            appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id=1),
            appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id="1"),
            appointment(datetime(2024, 3, 1, tzinfo=UTC), patient_id=2.0),
        ]

        assert as_pairs(TopPatientsBuilder.build(items, 5)) == [("1", 2), ("2", 1)]

    def test_labels_prefer_roster_name_then_session_name(self):
        when = datetime(2024, 3, 1, tzinfo=UTC)
        items = (
            [appointment(when, patient_id=3, patient_name="Session Name")] * 2
            + [appointment(when, patient_id=1, patient_name="Carla")] * 2
            + [appointment(when, patient_id=2)] * 2
            + [appointment(when, patient_id=4)]
        )
        names = {"3": "Ana Gomez"}

        result = TopPatientsBuilder.build(items, 5, names)

        # Ties stay ordered by id, not by label
        assert as_pairs(result) == [("Carla", 2), ("2", 2), ("Ana Gomez", 2), ("4", 1)]
