"""
Datetime utilities for consistent timezone handling across the analytics engine.

All calendar arithmetic (period boundaries, day/week/month buckets, hour and
weekday occupancy) happens in a single practice timezone configured through
ANALYTICS_TIMEZONE. Naive datetimes are interpreted as already being in that
timezone; aware datetimes are converted to it.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from decimal import Decimal
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from practice_analytics.core.config import ANALYTICS_TIMEZONE

logger = logging.getLogger(__name__)


def get_timezone(name: str) -> tzinfo:
    """
    Resolve an IANA timezone name.

    Unknown names fall back to UTC so a misconfigured deployment still
    produces a dashboard; the misconfiguration is logged.
    """
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown ANALYTICS_TIMEZONE {name!r}, falling back to UTC")
        return timezone.utc


ANALYTICS_TZ = get_timezone(ANALYTICS_TIMEZONE)


def local_now(tz: Optional[tzinfo] = None) -> datetime:
    """Get the current datetime in the practice timezone."""
    return datetime.now(tz or ANALYTICS_TZ)


def ensure_local(dt: Optional[datetime], tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware in the practice timezone.

    Args:
        dt: Datetime to convert (naive or timezone-aware)
        tz: Target timezone, defaults to ANALYTICS_TZ

    Returns:
        Timezone-aware datetime, or None if input is None
    """
    if dt is None:
        return None

    target = tz or ANALYTICS_TZ
    if dt.tzinfo is None:
        # Naive values are assumed to already be practice-local
        return dt.replace(tzinfo=target)
    return dt.astimezone(target)


def start_of_day(d: date, tz: Optional[tzinfo] = None) -> datetime:
    """First instant (00:00:00) of a calendar day in the practice timezone."""
    return datetime.combine(d, time.min, tzinfo=tz or ANALYTICS_TZ)


def end_of_day(d: date, tz: Optional[tzinfo] = None) -> datetime:
    """Last instant (23:59:59.999999) of a calendar day in the practice timezone."""
    return datetime.combine(d, time.max, tzinfo=tz or ANALYTICS_TZ)


def is_date_only(value: Any) -> bool:
    """
    Check whether a value carries a calendar date but no time of day.

    Used by the period resolver to expand date-only range bounds to whole days.
    """
    if isinstance(value, datetime):
        return False
    if isinstance(value, date):
        return True
    if isinstance(value, str):
        text = value.strip()
        return len(text) == 10 and text[4:5] == "-" and text[7:8] == "-"
    return False


def parse_timestamp(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Parse a record timestamp into an aware datetime in the practice timezone.

    Handles:
    - datetime objects (naive values are assumed practice-local)
    - date objects (midnight of that day)
    - ISO format strings, with or without offset, "Z" meaning UTC
    - int/float/Decimal POSIX timestamps in seconds

    Returns None instead of raising for missing or malformed input, so callers
    can exclude the record from aggregation.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return ensure_local(value, tz)

    if isinstance(value, date):
        return start_of_day(value, tz)

    if isinstance(value, (int, float, Decimal)):
        try:
            return datetime.fromtimestamp(float(value), tz=tz or ANALYTICS_TZ)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        return ensure_local(parsed, tz)

    return None


def shift_months(d: date, months: int) -> date:
    """
    Move a first-of-month date by a number of calendar months.

    Only used with day == 1, so month-length clamping is never needed.
    """
    month_index = d.year * 12 + (d.month - 1) + months
    return date(month_index // 12, month_index % 12 + 1, 1)


def days_between(start: date, end: date) -> int:
    """Inclusive number of calendar days from start to end."""
    return (end - start).days + 1


def week_start(d: date) -> date:
    """Monday of the week containing d."""
    return d - timedelta(days=d.weekday())
