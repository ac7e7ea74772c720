"""
Period resolver for analytics calculations.

Turns a named range ("week", "month", "quarter", "year") or explicit bounds into
concrete calendar boundaries, the equivalent previous period used for deltas,
and the bucket granularity used by time-series charts.
"""
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, List, Mapping, Optional, Tuple
import logging

from practice_analytics.core.constants import (
    CUSTOM_RANGE,
    DAY_BUCKET_MAX_SPAN_DAYS,
    NAMED_RANGES,
    WEEK_BUCKET_MAX_SPAN_DAYS,
)
from practice_analytics.services.analytics_types import BucketUnit, ResolvedPeriod
from practice_analytics.utils.datetime_utils import (
    ANALYTICS_TZ,
    days_between,
    end_of_day,
    is_date_only,
    parse_timestamp,
    shift_months,
    start_of_day,
    week_start,
)

logger = logging.getLogger(__name__)

# The previous period ends exactly one tick before the current one starts
ONE_TICK = timedelta(microseconds=1)


class InvalidRangeError(ValueError):
    """Raised when a requested analytics period cannot be resolved."""
    pass


class PeriodResolver:
    """
    Resolves requested ranges into ResolvedPeriod objects.

    Handles:
    - Calendar-aligned named ranges (Monday-start weeks, calendar months,
      quarters starting Jan/Apr/Jul/Oct, calendar years)
    - Explicit {from, to} bounds, date-only bounds expanded to whole days
    - Previous-period computation that follows the calendar (previous month is
      the calendar month before, not a fixed 30-day shift)
    """

    @staticmethod
    def resolve(
        time_range: Any,
        reference_date: Any,
        tz: Optional[tzinfo] = None
    ) -> ResolvedPeriod:
        """
        Resolve a requested range relative to a reference date.

        Args:
            time_range: Named range string, mapping with from/to (or start/end)
                keys, or a (from, to) tuple
            reference_date: The "now" the named range is relative to
            tz: Practice timezone, defaults to ANALYTICS_TZ

        Returns:
            ResolvedPeriod with current and previous boundaries

        Raises:
            InvalidRangeError: If the range is unknown, malformed, or reversed
        """
        tz = tz or ANALYTICS_TZ

        if isinstance(time_range, str):
            name = time_range.strip().lower()
            if name not in NAMED_RANGES:
                raise InvalidRangeError(f"Unknown range: {time_range!r}")
            reference = parse_timestamp(reference_date, tz)
            if reference is None:
                raise InvalidRangeError(f"Invalid reference date: {reference_date!r}")
            return PeriodResolver._resolve_named(name, reference.date(), tz)

        raw_from, raw_to = PeriodResolver._unpack_bounds(time_range)
        return PeriodResolver._resolve_explicit(raw_from, raw_to, tz)

    @staticmethod
    def _resolve_named(name: str, reference: date, tz: tzinfo) -> ResolvedPeriod:
        if name == "week":
            first_day = week_start(reference)
            last_day = first_day + timedelta(days=6)
            previous_first = first_day - timedelta(days=7)
        elif name == "month":
            first_day = reference.replace(day=1)
            last_day = shift_months(first_day, 1) - timedelta(days=1)
            previous_first = shift_months(first_day, -1)
        elif name == "quarter":
            first_day = date(reference.year, 3 * ((reference.month - 1) // 3) + 1, 1)
            last_day = shift_months(first_day, 3) - timedelta(days=1)
            previous_first = shift_months(first_day, -3)
        else:  # year
            first_day = date(reference.year, 1, 1)
            last_day = date(reference.year, 12, 31)
            previous_first = date(reference.year - 1, 1, 1)

        start = start_of_day(first_day, tz)
        end = end_of_day(last_day, tz)
        period = ResolvedPeriod(
            range=name,
            start=start,
            end=end,
            previous_start=start_of_day(previous_first, tz),
            previous_end=start - ONE_TICK,
            bucket_unit=PeriodResolver.bucket_unit_for(first_day, last_day),
        )
        logger.debug(f"Resolved {name} period {period.start} - {period.end} ({period.bucket_unit} buckets)")
        return period

    @staticmethod
    def _resolve_explicit(raw_from: Any, raw_to: Any, tz: tzinfo) -> ResolvedPeriod:
        start = parse_timestamp(raw_from, tz)
        end = parse_timestamp(raw_to, tz)
        if start is None or end is None:
            raise InvalidRangeError(f"Invalid range bounds: from={raw_from!r}, to={raw_to!r}")

        # Date-only upper bounds cover the whole final day
        if is_date_only(raw_to):
            end = end_of_day(end.date(), tz)

        if end < start:
            raise InvalidRangeError(f"Range end {end.isoformat()} is before start {start.isoformat()}")

        previous_end = start - ONE_TICK
        return ResolvedPeriod(
            range=CUSTOM_RANGE,
            start=start,
            end=end,
            previous_start=previous_end - (end - start),
            previous_end=previous_end,
            bucket_unit=PeriodResolver.bucket_unit_for(start.date(), end.date()),
        )

    @staticmethod
    def _unpack_bounds(time_range: Any) -> Tuple[Any, Any]:
        if isinstance(time_range, Mapping):
            if "from" in time_range or "to" in time_range:
                return time_range.get("from"), time_range.get("to")
            return time_range.get("start"), time_range.get("end")
        if isinstance(time_range, (tuple, list)) and len(time_range) == 2:
            return time_range[0], time_range[1]
        raise InvalidRangeError(f"Unsupported range: {time_range!r}")

    @staticmethod
    def bucket_unit_for(first_day: date, last_day: date) -> BucketUnit:
        """Pick day/week/month buckets from the inclusive span in calendar days."""
        span_days = days_between(first_day, last_day)
        if span_days <= DAY_BUCKET_MAX_SPAN_DAYS:
            return "day"
        if span_days <= WEEK_BUCKET_MAX_SPAN_DAYS:
            return "week"
        return "month"


def bucket_key(d: date, unit: BucketUnit) -> date:
    """Start date of the bucket that contains d."""
    if unit == "day":
        return d
    if unit == "week":
        return week_start(d)
    return d.replace(day=1)


def bucket_keys(period: ResolvedPeriod) -> List[date]:
    """
    Enumerate every bucket start implied by a period, in chronological order.

    Weekly buckets are Monday-aligned and monthly buckets first-of-month, so the
    first bucket may start before period.start when the period is not aligned.
    """
    unit = period.bucket_unit
    current = bucket_key(period.start.date(), unit)
    last = period.end.date()

    keys: List[date] = []
    while current <= last:
        keys.append(current)
        if unit == "day":
            current += timedelta(days=1)
        elif unit == "week":
            current += timedelta(days=7)
        else:
            current = shift_months(current, 1)
    return keys


def resolve_period(
    time_range: Any,
    reference_date: Any,
    tz: Optional[tzinfo] = None
) -> ResolvedPeriod:
    """Resolve a named or explicit range; see PeriodResolver.resolve."""
    return PeriodResolver.resolve(time_range, reference_date, tz)


def contains(period: ResolvedPeriod, moment: datetime) -> bool:
    """Inclusive membership test for the current period."""
    return period.start <= moment <= period.end


def contains_previous(period: ResolvedPeriod, moment: datetime) -> bool:
    """Inclusive membership test for the previous period."""
    return period.previous_start <= moment <= period.previous_end
