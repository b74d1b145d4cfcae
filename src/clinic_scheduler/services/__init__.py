"""
Services package for scheduling business logic.

This package contains the scheduling engine, its collaborators and the
read-only calendar views.
"""

from .service_catalog import ServiceCatalog
from .repositories import (
    AppointmentRepository,
    ClientDirectory,
    InMemoryAppointmentRepository,
    InMemoryClientDirectory,
)
from .scheduling_engine import SchedulingEngine

__all__ = [
    "ServiceCatalog",
    "AppointmentRepository",
    "ClientDirectory",
    "InMemoryAppointmentRepository",
    "InMemoryClientDirectory",
    "SchedulingEngine",
]
