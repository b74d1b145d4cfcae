"""
Read-only calendar views over an appointment snapshot.

Every function takes the current list of appointments as an argument and
returns new values; nothing here talks to storage. Day matching uses the
clinic's local calendar (year, month and day in the clinic timezone), so an
appointment at 23:30 local time belongs to that local day even when it falls
on the next day in UTC.
"""

from datetime import date, datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Union

from clinic_scheduler.core.constants import UPCOMING_APPOINTMENTS_LIMIT
from clinic_scheduler.shared_types.scheduling import (
    Appointment,
    AppointmentStatus,
    DailyStats,
    DayBucket,
    WeekBucket,
)
from clinic_scheduler.utils.appointment_queries import (
    filter_by_status,
    filter_future_appointments,
    filter_on_day,
    sort_by_start,
)
from clinic_scheduler.utils.datetime_utils import local_date, start_of_week, week_days


def week_bucket(
    appointments: Iterable[Appointment],
    anchor: Union[date, datetime],
    tz: Optional[tzinfo] = None
) -> WeekBucket:
    """
    Group appointments into the Monday-start week containing ``anchor``.

    Args:
        appointments: Appointment snapshot
        anchor: Any date or datetime in the wanted week (time of day is ignored)
        tz: Calendar timezone (defaults to the clinic timezone)

    Returns:
        WeekBucket with seven DayBuckets, each sorted ascending by start.
        Appointments outside the week appear in no bucket.
    """
    days = week_days(anchor, tz)
    by_day: Dict[date, List[Appointment]] = {day: [] for day in days}
    for appointment in appointments:
        day = local_date(appointment.starts_at, tz)
        if day in by_day:
            by_day[day].append(appointment)

    return WeekBucket(
        week_start=days[0],
        days=[DayBucket(day=day, appointments=sort_by_start(by_day[day])) for day in days],
    )


def appointments_on_day(
    appointments: Iterable[Appointment],
    day: Union[date, datetime],
    tz: Optional[tzinfo] = None
) -> List[Appointment]:
    """Appointments starting on the local calendar day of ``day``, ascending by start."""
    return sort_by_start(filter_on_day(appointments, local_date(day, tz), tz))


def daily_stats(
    appointments: Iterable[Appointment],
    day: Union[date, datetime],
    tz: Optional[tzinfo] = None
) -> DailyStats:
    """Count the day's appointments in total and by confirmed/completed status."""
    todays = filter_on_day(appointments, local_date(day, tz), tz)
    return {
        "total": len(todays),
        "confirmed": len(filter_by_status(todays, AppointmentStatus.CONFIRMED)),
        "completed": len(filter_by_status(todays, AppointmentStatus.COMPLETED)),
    }


def appointments_in_range(
    appointments: Iterable[Appointment],
    start_day: date,
    end_day: date,
    tz: Optional[tzinfo] = None
) -> List[Appointment]:
    """
    Appointments whose local start day is within ``[start_day, end_day]``.

    Raises:
        ValueError: If end_day is before start_day
    """
    if end_day < start_day:
        raise ValueError(f"end_day {end_day} is before start_day {start_day}")
    return sort_by_start(
        a for a in appointments
        if start_day <= local_date(a.starts_at, tz) <= end_day
    )


def appointments_for_client(appointments: Iterable[Appointment], client_id: str) -> List[Appointment]:
    """A client's appointment history, newest first."""
    return sort_by_start((a for a in appointments if a.client_id == client_id), descending=True)


def list_view(appointments: Iterable[Appointment]) -> List[Appointment]:
    """All appointments, most recent start first."""
    return sort_by_start(appointments, descending=True)


def upcoming_appointments(
    appointments: Iterable[Appointment],
    now: datetime,
    limit: int = UPCOMING_APPOINTMENTS_LIMIT,
    tz: Optional[tzinfo] = None
) -> List[Appointment]:
    """Next ``limit`` appointments starting at or after ``now``, skipping cancelled ones."""
    future = [
        a for a in filter_future_appointments(appointments, now, tz)
        if a.status != AppointmentStatus.CANCELLED
    ]
    return sort_by_start(future)[:max(limit, 0)]


def pending_count(appointments: Iterable[Appointment]) -> int:
    """Number of appointments still waiting for confirmation."""
    return len(filter_by_status(appointments, AppointmentStatus.SCHEDULED))


def week_count(
    appointments: Iterable[Appointment],
    reference: Union[date, datetime],
    tz: Optional[tzinfo] = None
) -> int:
    """Number of appointments starting in the week of ``reference``."""
    monday = start_of_week(reference, tz)
    return sum(1 for a in appointments if start_of_week(a.starts_at, tz) == monday)
