"""
Utility functions for consistent appointment queries.

This module contains reusable filters over in-memory appointment snapshots so
that common patterns (local-day matching, active appointments, future
appointments) are applied the same way by the engine and the calendar views.
"""

from datetime import date, datetime, tzinfo
from typing import Iterable, List, Optional

from clinic_scheduler.shared_types.scheduling import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentStatus,
)
from clinic_scheduler.utils.datetime_utils import ensure_clinic_tz, local_date


def starts_on_day(appointment: Appointment, day: date, tz: Optional[tzinfo] = None) -> bool:
    """
    Whether the appointment starts on ``day`` of the local calendar.

    Compares local year, month and day, not UTC day boundaries.
    """
    return local_date(appointment.starts_at, tz) == day


def filter_on_day(
    appointments: Iterable[Appointment],
    day: date,
    tz: Optional[tzinfo] = None
) -> List[Appointment]:
    """Appointments starting on ``day``, in input order."""
    return [a for a in appointments if starts_on_day(a, day, tz)]


def filter_by_status(
    appointments: Iterable[Appointment],
    status: AppointmentStatus
) -> List[Appointment]:
    return [a for a in appointments if a.status == status]


def filter_active_for_responsible(
    appointments: Iterable[Appointment],
    responsible_id: str,
    exclude_id: Optional[str] = None
) -> List[Appointment]:
    """
    Active (scheduled or confirmed) appointments of one responsible party.

    Args:
        appointments: Appointment snapshot
        responsible_id: Staff member to filter by
        exclude_id: Appointment to leave out (the one being rescheduled)
    """
    return [
        a for a in appointments
        if a.responsible_id == responsible_id
        and a.status in ACTIVE_STATUSES
        and (exclude_id is None or a.id != exclude_id)
    ]


def windows_intersect(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime
) -> bool:
    """Half-open interval intersection: touching windows do not overlap."""
    return start_a < end_b and start_b < end_a


def filter_future_appointments(
    appointments: Iterable[Appointment],
    now: datetime,
    tz: Optional[tzinfo] = None
) -> List[Appointment]:
    """Appointments that start at or after ``now`` (naive ``now`` is clinic-local)."""
    now = ensure_clinic_tz(now, tz)  # type: ignore[assignment]
    return [a for a in appointments if a.starts_at >= now]


def sort_by_start(appointments: Iterable[Appointment], descending: bool = False) -> List[Appointment]:
    """Stable sort by ``starts_at``."""
    return sorted(appointments, key=lambda a: a.starts_at, reverse=descending)
