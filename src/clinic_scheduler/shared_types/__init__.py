"""
Shared type definitions for the clinic scheduler.

This module contains the models, dataclasses and result types used across services.
"""

from clinic_scheduler.shared_types.scheduling import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    Appointment,
    AppointmentCandidate,
    AppointmentStatus,
    DailyStats,
    DayBucket,
    SchedulingError,
    SchedulingErrorKind,
    SchedulingFailure,
    SchedulingResult,
    ServiceCatalogEntry,
    WeekBucket,
)

__all__ = [
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "Appointment",
    "AppointmentCandidate",
    "AppointmentStatus",
    "DailyStats",
    "DayBucket",
    "SchedulingError",
    "SchedulingErrorKind",
    "SchedulingFailure",
    "SchedulingResult",
    "ServiceCatalogEntry",
    "WeekBucket",
]
