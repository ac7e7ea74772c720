"""
Period filter for analytics calculations.

Narrows record collections to those whose relevant date falls inside the
current or the previous period of a ResolvedPeriod.
"""
from datetime import tzinfo
from typing import Any, Iterable, List, Optional, TypeVar

from practice_analytics.services.analytics_extractor import read_field
from practice_analytics.services.analytics_period import contains, contains_previous
from practice_analytics.services.analytics_types import PeriodSplit, ResolvedPeriod
from practice_analytics.utils.datetime_utils import parse_timestamp

T = TypeVar("T")


class PeriodFilter:
    """
    Applies period boundaries to records.

    Boundaries are inclusive on both ends. Records whose date field is missing
    or unparseable land in neither set; they are absent, not zero.
    """

    @staticmethod
    def split(
        records: Optional[Iterable[T]],
        period: ResolvedPeriod,
        date_field: str,
        tz: Optional[tzinfo] = None
    ) -> PeriodSplit:
        """
        Partition records into current and previous period.

        Args:
            records: Raw records or extracted items (mappings or objects)
            period: Resolved period with current and previous boundaries
            date_field: Name of the field holding the relevant timestamp
            tz: Practice timezone for naive or string timestamps

        Returns:
            PeriodSplit(current, previous), each preserving input order
        """
        current: List[T] = []
        previous: List[T] = []

        for record in records or ():
            moment = parse_timestamp(read_field(record, date_field), tz)
            if moment is None:
                continue
            if contains(period, moment):
                current.append(record)
            elif contains_previous(period, moment):
                previous.append(record)

        return PeriodSplit(current=current, previous=previous)

    @staticmethod
    def in_period(
        records: Optional[Iterable[T]],
        period: ResolvedPeriod,
        date_field: str,
        tz: Optional[tzinfo] = None
    ) -> List[T]:
        """Records inside the current period only."""
        return PeriodFilter.split(records, period, date_field, tz).current


def filter_by_period(
    records: Optional[Iterable[Any]],
    period: ResolvedPeriod,
    date_field: str,
    tz: Optional[tzinfo] = None
) -> PeriodSplit:
    """Partition records into current/previous period; see PeriodFilter.split."""
    return PeriodFilter.split(records, period, date_field, tz)
