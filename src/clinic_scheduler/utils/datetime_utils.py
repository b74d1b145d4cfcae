"""
Datetime utilities for consistent timezone handling across the scheduler.

All calendar logic (day bucketing, week boundaries, "today") runs on the
clinic's local calendar, configured through CLINIC_TIMEZONE. Instants are kept
timezone-aware; naive values are interpreted as clinic-local time.
"""

from datetime import date, datetime, timedelta, tzinfo
from typing import List, Optional, Union
from zoneinfo import ZoneInfo

from clinic_scheduler.core.config import CLINIC_TIMEZONE
from clinic_scheduler.core.constants import DAYS_PER_WEEK, WEEK_START_WEEKDAY

CLINIC_TZ = ZoneInfo(CLINIC_TIMEZONE)


def clinic_now(tz: Optional[tzinfo] = None) -> datetime:
    """
    Get the current datetime in the clinic timezone.

    Returns:
        Current timezone-aware datetime
    """
    return datetime.now(tz or CLINIC_TZ)


def ensure_clinic_tz(dt: Optional[datetime], tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware in the clinic timezone.

    Args:
        dt: Datetime to normalize
        tz: Timezone to use instead of the configured clinic timezone

    Returns:
        Timezone-aware datetime, or None if input is None
    """
    if dt is None:
        return None

    target = tz or CLINIC_TZ
    if dt.tzinfo is None:
        # Naive values are already clinic-local wall time
        return dt.replace(tzinfo=target)
    return dt.astimezone(target)


def parse_datetime_to_clinic(v: Union[str, datetime], tz: Optional[tzinfo] = None) -> datetime:
    """
    Parse an ISO datetime string (or take a datetime) and return it in the clinic timezone.

    Handles offsets, a trailing "Z" for UTC, and naive strings (clinic-local).

    Raises:
        ValueError: If the string cannot be parsed
    """
    if isinstance(v, datetime):
        result = ensure_clinic_tz(v, tz)
    else:
        try:
            parsed = datetime.fromisoformat(v.strip().replace('Z', '+00:00'))
        except ValueError as e:
            raise ValueError(f"Invalid datetime string format: {v}") from e
        result = ensure_clinic_tz(parsed, tz)
    if result is None:
        raise ValueError("Cannot parse None datetime")
    return result


def local_date(value: Union[date, datetime], tz: Optional[tzinfo] = None) -> date:
    """
    Calendar date of a value on the clinic's local calendar.

    Datetimes are converted to the clinic timezone first, so an instant just
    after midnight UTC can still belong to the previous local day. Plain dates
    are returned unchanged.
    """
    if isinstance(value, datetime):
        local = ensure_clinic_tz(value, tz)
        assert local is not None
        return local.date()
    return value


def start_of_week(value: Union[date, datetime], tz: Optional[tzinfo] = None) -> date:
    """Monday of the week containing ``value`` (time of day is ignored)."""
    day = local_date(value, tz)
    offset = (day.weekday() - WEEK_START_WEEKDAY) % DAYS_PER_WEEK
    return day - timedelta(days=offset)


def week_days(anchor: Union[date, datetime], tz: Optional[tzinfo] = None) -> List[date]:
    """The seven consecutive days (Monday first) of the week containing ``anchor``."""
    monday = start_of_week(anchor, tz)
    return [monday + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def shift_week(anchor: Union[date, datetime], weeks: int, tz: Optional[tzinfo] = None) -> date:
    """Monday of the week ``weeks`` weeks away from the week of ``anchor`` (negative goes back)."""
    return start_of_week(anchor, tz) + timedelta(weeks=weeks)


def is_same_week(
    value: Union[date, datetime],
    reference: Union[date, datetime],
    tz: Optional[tzinfo] = None
) -> bool:
    """Whether two values fall in the same Monday-start week of the local calendar."""
    return start_of_week(value, tz) == start_of_week(reference, tz)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end`` (negative when end is earlier)."""
    seconds = (end - start).total_seconds()
    return int(seconds // 60) if seconds >= 0 else -int(-seconds // 60)


def format_date(value: Union[date, datetime], tz: Optional[tzinfo] = None) -> str:
    """Format as ``dd/mm/yyyy`` on the local calendar."""
    return local_date(value, tz).strftime('%d/%m/%Y')


def format_time(dt: datetime, tz: Optional[tzinfo] = None) -> str:
    """Format the local wall-clock time as ``HH:MM``."""
    local = ensure_clinic_tz(dt, tz)
    if local is None:
        raise ValueError("Cannot format None datetime")
    return local.strftime('%H:%M')


def format_datetime(dt: datetime, tz: Optional[tzinfo] = None) -> str:
    """
    Format a datetime for messages and logs as ``dd/mm/yyyy HH:MM``.

    The value is shown in the clinic timezone regardless of its own offset.
    """
    local = ensure_clinic_tz(dt, tz)
    if local is None:
        raise ValueError("Cannot format None datetime")
    return local.strftime('%d/%m/%Y %H:%M')
