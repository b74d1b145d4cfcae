"""
Test utilities for clinic scheduler tests.
"""

from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from clinic_scheduler.shared_types.scheduling import Appointment, AppointmentStatus

# Calendar used throughout the tests (UTC-6, no daylight saving since 2022)
TZ = ZoneInfo("America/Mexico_City")


def at(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """Clinic-local aware datetime."""
    return datetime(year, month, day, hour, minute, tzinfo=TZ)


def make_appointment(
    appointment_id: Optional[str] = "a1",
    starts_at: Optional[datetime] = None,
    duration_minutes: int = 60,
    status: AppointmentStatus = AppointmentStatus.SCHEDULED,
    responsible_id: str = "u1",
    client_id: str = "c1",
    service: str = "Limpieza Facial",
) -> Appointment:
    """Build a stored-looking appointment with sensible defaults."""
    start = starts_at or at(2025, 1, 10, 9)
    return Appointment(
        id=appointment_id,
        client_id=client_id,
        client_display_name="Ana López",
        service=service,
        starts_at=start,
        ends_at=start + timedelta(minutes=duration_minutes),
        status=status,
        responsible_id=responsible_id,
        created_at=at(2025, 1, 1, 8),
    )
