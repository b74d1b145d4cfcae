# Package initialization
# Import all models to ensure relationships are properly established
from .client import Client
from .appointment import AppointmentRecord
from .service_type import ServiceType

__all__ = [
    "Client",
    "AppointmentRecord",
    "ServiceType",
]
