"""
Appointment model representing stored appointments.

Rows are the persisted form of the engine's Appointment values. The engine
never reads this table directly; SqlAlchemyAppointmentRepository converts
between rows and domain values.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic_scheduler.core.constants import MAX_NOTES_LENGTH, MAX_STRING_LENGTH
from clinic_scheduler.core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class AppointmentRecord(Base):
    """
    Appointment entity: a client booked for one service with one staff member.

    The client's display name is a snapshot taken when the appointment was
    created and is not updated when the client is renamed.
    """

    __tablename__ = "appointments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    """Opaque identifier assigned on insert."""

    client_id: Mapped[str] = mapped_column(ForeignKey("clients.id"))
    """Reference to the client who has booked this appointment."""

    client_display_name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH), default="")
    """Client name at creation time (denormalized snapshot)."""

    service: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Service name from the service catalog."""

    starts_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    ends_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))

    status: Mapped[str] = mapped_column(String(50), default="scheduled")
    """Valid values: 'scheduled', 'confirmed', 'completed', 'cancelled', 'no_show'."""

    responsible_id: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))
    """Identifier of the staff member assigned to the appointment."""

    notes: Mapped[Optional[str]] = mapped_column(String(MAX_NOTES_LENGTH), nullable=True)

    reminders_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Set once at creation."""

    client = relationship("Client", back_populates="appointments")

    __table_args__ = (
        Index('idx_appointments_client', 'client_id'),
        Index('idx_appointments_status', 'status'),
        # Overlap lookups filter by responsible party and start time
        Index('idx_appointments_responsible_start', 'responsible_id', 'starts_at'),
    )
