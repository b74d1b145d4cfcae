"""
Clinic Scheduler

Appointment scheduling engine for a clinic: derives and validates appointment
windows, moves appointments through their status lifecycle and builds weekly
and daily calendar views over an appointment snapshot.
"""

from clinic_scheduler.services import (
    InMemoryAppointmentRepository,
    InMemoryClientDirectory,
    SchedulingEngine,
    ServiceCatalog,
)
from clinic_scheduler.shared_types import (
    Appointment,
    AppointmentCandidate,
    AppointmentStatus,
    SchedulingErrorKind,
    SchedulingResult,
)

__version__ = "1.0.0"

__all__ = [
    "Appointment",
    "AppointmentCandidate",
    "AppointmentStatus",
    "InMemoryAppointmentRepository",
    "InMemoryClientDirectory",
    "SchedulingEngine",
    "SchedulingErrorKind",
    "SchedulingResult",
    "ServiceCatalog",
]
