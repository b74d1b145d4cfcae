"""
Collaborator interfaces used by the scheduling engine, with in-memory adapters.

The engine depends only on the protocols defined here. Storage and client
lookup live outside the engine; the in-memory adapters are used for tests and
for embedding the engine without a database.
"""

import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from clinic_scheduler.shared_types.scheduling import Appointment


class AppointmentRepository(Protocol):
    """Persistence collaborator for appointments."""

    async def create(self, appointment: Appointment) -> Appointment:
        """Store a new appointment and return it with its assigned id."""
        ...

    async def save(self, appointment_id: str, updates: Mapping[str, Any]) -> Optional[Appointment]:
        """
        Apply a partial update and return the stored appointment.

        Returns None when the appointment no longer exists.
        """
        ...

    async def list(self) -> List[Appointment]:
        """Current snapshot of all stored appointments."""
        ...

    async def get(self, appointment_id: str) -> Optional[Appointment]:
        """Stored appointment by id, or None if it does not exist."""
        ...


class ClientDirectory(Protocol):
    """Client lookup collaborator."""

    async def get_client_name(self, client_id: str) -> Optional[str]:
        """Display name of the client, or None if the client does not exist."""
        ...


class InMemoryAppointmentRepository:
    """Dictionary-backed AppointmentRepository."""

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        self._appointments: Dict[str, Appointment] = {}
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))

    async def create(self, appointment: Appointment) -> Appointment:
        if appointment.id is not None:
            raise ValueError(f"Appointment already has an id: {appointment.id}")
        stored = appointment.model_copy(update={"id": self._id_factory()})
        self._appointments[stored.id] = stored  # type: ignore[index]
        return stored

    async def save(self, appointment_id: str, updates: Mapping[str, Any]) -> Optional[Appointment]:
        current = self._appointments.get(appointment_id)
        if current is None:
            return None
        # Re-validate so a partial update cannot break the window invariant
        stored = Appointment.model_validate({**current.model_dump(), **dict(updates), "id": appointment_id})
        self._appointments[appointment_id] = stored
        return stored

    async def list(self) -> List[Appointment]:
        return list(self._appointments.values())

    async def get(self, appointment_id: str) -> Optional[Appointment]:
        return self._appointments.get(appointment_id)

    def remove(self, appointment_id: str) -> None:
        """Delete an appointment, as another writer of the store would."""
        self._appointments.pop(appointment_id, None)


class InMemoryClientDirectory:
    """Dictionary-backed ClientDirectory."""

    def __init__(self, clients: Optional[Mapping[str, str]] = None):
        self._clients: Dict[str, str] = dict(clients or {})

    def add(self, client_id: str, name: str) -> None:
        self._clients[client_id] = name

    async def get_client_name(self, client_id: str) -> Optional[str]:
        return self._clients.get(client_id)
