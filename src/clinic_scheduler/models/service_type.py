"""
Service type model backing the service catalog.

Each row is one service offered by the clinic, such as "Consulta Inicial" or
"Limpieza Facial", with the duration used when an appointment is booked
without an explicit end time.
"""

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from clinic_scheduler.core.constants import MAX_STRING_LENGTH
from clinic_scheduler.core.database import Base


class ServiceType(Base):
    """Service catalog entry: unique name and default duration."""

    __tablename__ = "service_types"

    name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH), primary_key=True)
    """Human-readable service name; unique key of the catalog."""

    default_duration_minutes: Mapped[int] = mapped_column(Integer)
    """Default duration in minutes (e.g., 30, 45, 60, 90)."""

    display_order: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        CheckConstraint('default_duration_minutes > 0', name='ck_service_types_positive_duration'),
    )
