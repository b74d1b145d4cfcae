"""
Client model.

Clients are owned by the wider clinic application; the scheduler only needs
their identifier and name to snapshot ``client_display_name``.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic_scheduler.core.constants import MAX_STRING_LENGTH
from clinic_scheduler.core.database import Base


class Client(Base):
    """A clinic client who can book appointments."""

    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    full_name: Mapped[str] = mapped_column(String(MAX_STRING_LENGTH))

    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    email: Mapped[Optional[str]] = mapped_column(String(MAX_STRING_LENGTH), nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))

    appointments = relationship("AppointmentRecord", back_populates="client")
