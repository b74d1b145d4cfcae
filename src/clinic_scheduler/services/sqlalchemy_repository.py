"""
SQLAlchemy-backed scheduling collaborators.

These adapters implement AppointmentRepository and ClientDirectory on top of
a SQLAlchemy session factory. Datetimes are stored in UTC and returned
in the clinic timezone.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from clinic_scheduler.core.database import SessionLocal
from clinic_scheduler.models import AppointmentRecord, Client
from clinic_scheduler.shared_types.scheduling import Appointment, AppointmentStatus
from clinic_scheduler.utils.datetime_utils import ensure_clinic_tz

logger = logging.getLogger(__name__)

_DATETIME_FIELDS = ("starts_at", "ends_at", "created_at")

_UPDATABLE_FIELDS = frozenset({
    "service", "starts_at", "ends_at", "status", "responsible_id",
    "notes", "reminders_sent",
})


def _to_storage(value: datetime) -> datetime:
    aware = ensure_clinic_tz(value)
    assert aware is not None
    return aware.astimezone(timezone.utc)


def _from_storage(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    # Some backends (SQLite) drop the offset; stored values are UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return ensure_clinic_tz(value)


def record_to_appointment(record: AppointmentRecord) -> Appointment:
    """Convert an ORM row to a domain Appointment."""
    return Appointment(
        id=record.id,
        client_id=record.client_id,
        client_display_name=record.client_display_name or "",
        service=record.service,
        starts_at=_from_storage(record.starts_at),
        ends_at=_from_storage(record.ends_at),
        status=AppointmentStatus(record.status),
        responsible_id=record.responsible_id,
        notes=record.notes or "",
        reminders_sent=record.reminders_sent,
        created_at=_from_storage(record.created_at),
    )


class SqlAlchemyAppointmentRepository:
    """
    AppointmentRepository backed by the ``appointments`` table.

    Each call opens its own session from ``session_factory`` and runs the
    blocking database work in a worker thread, so the event loop is never
    blocked. Each write commits. On database errors the session is rolled
    back and the original exception is re-raised.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    async def create(self, appointment: Appointment) -> Appointment:
        if appointment.id is not None:
            raise ValueError(f"Appointment already has an id: {appointment.id}")
        return await asyncio.to_thread(self._create, appointment)

    async def save(self, appointment_id: str, updates: Mapping[str, Any]) -> Optional[Appointment]:
        unknown = set(updates) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")
        return await asyncio.to_thread(self._save, appointment_id, dict(updates))

    async def list(self) -> List[Appointment]:
        return await asyncio.to_thread(self._list)

    async def get(self, appointment_id: str) -> Optional[Appointment]:
        return await asyncio.to_thread(self._get, appointment_id)

    def _create(self, appointment: Appointment) -> Appointment:
        record = AppointmentRecord(
            client_id=appointment.client_id,
            client_display_name=appointment.client_display_name,
            service=appointment.service,
            starts_at=_to_storage(appointment.starts_at),
            ends_at=_to_storage(appointment.ends_at),
            status=appointment.status.value,
            responsible_id=appointment.responsible_id,
            notes=appointment.notes or None,
            reminders_sent=appointment.reminders_sent,
            created_at=_to_storage(appointment.created_at) if appointment.created_at else None,
        )
        with self.session_factory() as db:
            try:
                db.add(record)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.exception(f"Failed to create appointment: {e}")
                raise
            return record_to_appointment(record)

    def _save(self, appointment_id: str, updates: Dict[str, Any]) -> Optional[Appointment]:
        with self.session_factory() as db:
            try:
                record = db.get(AppointmentRecord, appointment_id)
                if record is None:
                    return None

                for key, value in updates.items():
                    if key in _DATETIME_FIELDS:
                        value = _to_storage(value)
                    elif key == "status":
                        value = AppointmentStatus(value).value
                    setattr(record, key, value)

                # Validate before committing so a bad partial update never reaches the table
                appointment = record_to_appointment(record)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.exception(f"Failed to update appointment {appointment_id}: {e}")
                raise
            except ValueError:
                db.rollback()
                raise

        return appointment

    def _list(self) -> List[Appointment]:
        with self.session_factory() as db:
            records = db.query(AppointmentRecord).order_by(AppointmentRecord.starts_at).all()
            return [record_to_appointment(record) for record in records]

    def _get(self, appointment_id: str) -> Optional[Appointment]:
        with self.session_factory() as db:
            record = db.get(AppointmentRecord, appointment_id)
            return record_to_appointment(record) if record else None


class SqlAlchemyClientDirectory:
    """ClientDirectory backed by the ``clients`` table."""

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    async def get_client_name(self, client_id: str) -> Optional[str]:
        return await asyncio.to_thread(self._get_client_name, client_id)

    def _get_client_name(self, client_id: str) -> Optional[str]:
        with self.session_factory() as db:
            client = db.get(Client, client_id)
            return client.full_name if client else None
