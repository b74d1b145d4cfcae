"""
Scheduling engine for appointment windows and lifecycle.

This module owns the rules for deriving an appointment's start/end window
(catalog durations, cascading end-time recomputation, duration-preserving
reschedules), validating it, optionally rejecting overlaps for the same
responsible party, and moving appointments through the status machine.

Expected validation failures are returned as SchedulingResult errors.
Failures raised by the persistence or client-lookup collaborators propagate
unchanged.
"""

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar, Union

from clinic_scheduler.core.config import ENFORCE_OVERLAP_CHECK
from clinic_scheduler.services import calendar_views
from clinic_scheduler.services.repositories import AppointmentRepository, ClientDirectory
from clinic_scheduler.services.service_catalog import ServiceCatalog
from clinic_scheduler.services.status_machine import allowed_transitions, can_transition
from clinic_scheduler.shared_types.scheduling import (
    Appointment,
    AppointmentCandidate,
    AppointmentStatus,
    DailyStats,
    SchedulingErrorKind,
    SchedulingResult,
    WeekBucket,
)
from clinic_scheduler.utils.appointment_queries import (
    filter_active_for_responsible,
    sort_by_start,
    windows_intersect,
)
from clinic_scheduler.utils.datetime_utils import (
    CLINIC_TZ,
    clinic_now,
    ensure_clinic_tz,
    format_datetime,
    minutes_between,
)

logger = logging.getLogger(__name__)

WindowT = TypeVar("WindowT", Appointment, AppointmentCandidate)


class SchedulingEngine:
    """
    Appointment scheduling rules, independent of any UI or datastore.

    The engine keeps no appointment state of its own. Operations that need
    the existing appointments accept a snapshot; when none is given, the
    repository's current list is used.
    """

    def __init__(
        self,
        catalog: ServiceCatalog,
        appointments: AppointmentRepository,
        clients: ClientDirectory,
        enforce_overlap: bool = ENFORCE_OVERLAP_CHECK,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            catalog: Service name -> default duration
            appointments: Persistence collaborator
            clients: Client lookup collaborator
            enforce_overlap: Reject windows that overlap an active appointment
                of the same responsible party
            tz: Calendar timezone for day/week views (defaults to the clinic timezone)
            clock: Returns the current time; used for ``created_at``
        """
        self.catalog = catalog
        self.appointments = appointments
        self.clients = clients
        self.enforce_overlap = enforce_overlap
        self.tz = tz or CLINIC_TZ
        self._clock = clock or (lambda: clinic_now(self.tz))

    # ===== WINDOW COMPUTATION =====

    def resolve_duration(
        self,
        service: str,
        explicit_end: Optional[datetime],
        start: datetime
    ) -> SchedulingResult[int]:
        """
        Resolve an appointment's duration in minutes.

        With an explicit end, the duration is the whole minutes between start
        and end and must be positive. Without one, the catalog duration of
        the service is used, or the fallback (60 minutes) for unknown services.
        """
        start = ensure_clinic_tz(start, self.tz)  # type: ignore[assignment]
        if explicit_end is not None:
            explicit_end = ensure_clinic_tz(explicit_end, self.tz)
            minutes = minutes_between(start, explicit_end)
            if minutes <= 0:
                return SchedulingResult.failure(
                    SchedulingErrorKind.INVALID_WINDOW,
                    "La hora de fin debe ser posterior a la hora de inicio",
                    starts_at=start,
                    ends_at=explicit_end,
                )
            return SchedulingResult.success(minutes)

        return SchedulingResult.success(self.catalog.duration_for(service))

    def resolve_end(
        self,
        service: str,
        start: datetime,
        explicit_end: Optional[datetime] = None
    ) -> SchedulingResult[datetime]:
        """End time for a window: the explicit end if valid, else start plus the catalog duration."""
        start = ensure_clinic_tz(start, self.tz)  # type: ignore[assignment]
        explicit_end = ensure_clinic_tz(explicit_end, self.tz)
        duration = self.resolve_duration(service, explicit_end, start)
        if not duration.ok:
            return SchedulingResult(error=duration.error)
        if explicit_end is not None:
            return SchedulingResult.success(explicit_end)
        return SchedulingResult.success(start + timedelta(minutes=duration.unwrap()))

    def change_service(self, candidate: AppointmentCandidate, service: str) -> AppointmentCandidate:
        """
        Set the candidate's service and re-derive its end time.

        The end time is recomputed from the catalog only while the caller has
        not set it explicitly.
        """
        if candidate.ends_at_explicit:
            return candidate.model_copy(update={"service": service})

        starts_at = ensure_clinic_tz(candidate.starts_at, self.tz)
        ends_at = starts_at + timedelta(minutes=self.catalog.duration_for(service))  # type: ignore[operator]
        return candidate.model_copy(update={"service": service, "starts_at": starts_at, "ends_at": ends_at})

    def set_explicit_end(self, candidate: AppointmentCandidate, ends_at: datetime) -> AppointmentCandidate:
        """Set an end time chosen by the caller; later service changes keep it."""
        return candidate.model_copy(update={
            "ends_at": ensure_clinic_tz(ends_at, self.tz),
            "ends_at_explicit": True,
        })

    def reschedule_start(self, value: WindowT, new_start: datetime) -> WindowT:
        """
        Move a window to ``new_start`` keeping its previous duration.

        When the previous duration is missing or not positive (a candidate
        with no end yet), the fallback duration is used. Nothing is persisted;
        the caller must validate and save the result.
        """
        new_start = ensure_clinic_tz(new_start, self.tz)  # type: ignore[assignment]
        duration: Optional[timedelta] = None
        if value.ends_at is not None:
            duration = ensure_clinic_tz(value.ends_at, self.tz) - ensure_clinic_tz(value.starts_at, self.tz)  # type: ignore[operator]
        if duration is None or duration <= timedelta(0):
            duration = timedelta(minutes=self.catalog.fallback_minutes)

        return value.model_copy(update={"starts_at": new_start, "ends_at": new_start + duration})

    def check_overlap(
        self,
        responsible_id: str,
        starts_at: datetime,
        ends_at: datetime,
        existing: Iterable[Appointment],
        exclude_id: Optional[str] = None
    ) -> List[Appointment]:
        """
        Active appointments of ``responsible_id`` whose window intersects ``[starts_at, ends_at)``.

        Args:
            exclude_id: Appointment to ignore (the one being rescheduled)

        Returns:
            Conflicting appointments ordered by start; empty when the window is free
        """
        starts_at = ensure_clinic_tz(starts_at, self.tz)  # type: ignore[assignment]
        ends_at = ensure_clinic_tz(ends_at, self.tz)  # type: ignore[assignment]
        candidates = filter_active_for_responsible(existing, responsible_id, exclude_id)
        return sort_by_start(
            a for a in candidates
            if windows_intersect(starts_at, ends_at, a.starts_at, a.ends_at)
        )

    # ===== LIFECYCLE OPERATIONS =====

    async def schedule(
        self,
        candidate: AppointmentCandidate,
        existing: Optional[List[Appointment]] = None
    ) -> SchedulingResult[Appointment]:
        """
        Validate a candidate and store it as a new scheduled appointment.

        Steps:
        1. Check required fields (client, service, responsible party)
        2. Resolve the end time (explicit end or catalog duration)
        3. Look up the client and snapshot its display name
        4. Reject overlaps when overlap enforcement is enabled
        5. Create the appointment through the repository

        Args:
            candidate: Appointment to schedule
            existing: Current appointments snapshot used for the overlap check

        Returns:
            The stored appointment, or an INVALID_CANDIDATE, INVALID_WINDOW,
            NOT_FOUND or OVERLAP_CONFLICT error
        """
        missing = [
            name for name in ("client_id", "service", "responsible_id")
            if not getattr(candidate, name).strip()
        ]
        if missing:
            logger.warning(f"Rejected candidate with missing fields: {missing}")
            return SchedulingResult.failure(
                SchedulingErrorKind.INVALID_CANDIDATE,
                f"Faltan campos obligatorios: {', '.join(missing)}",
                fields=missing,
            )

        starts_at = ensure_clinic_tz(candidate.starts_at, self.tz)
        end = self.resolve_end(candidate.service, starts_at, candidate.ends_at)  # type: ignore[arg-type]
        if not end.ok:
            logger.warning(f"Rejected candidate for client {candidate.client_id}: {end.error.message}")  # type: ignore[union-attr]
            return SchedulingResult(error=end.error)
        ends_at = end.unwrap()

        client_name = await self.clients.get_client_name(candidate.client_id)
        if client_name is None:
            logger.warning(f"Rejected candidate: client {candidate.client_id} not found")
            return SchedulingResult.failure(
                SchedulingErrorKind.NOT_FOUND,
                "Cliente no encontrado",
                client_id=candidate.client_id,
            )

        conflict = await self._overlap_error(
            candidate.responsible_id, starts_at, ends_at, existing  # type: ignore[arg-type]
        )
        if conflict is not None:
            return conflict

        appointment = Appointment(
            client_id=candidate.client_id,
            client_display_name=client_name,
            service=candidate.service,
            starts_at=starts_at,
            ends_at=ends_at,
            status=AppointmentStatus.SCHEDULED,
            responsible_id=candidate.responsible_id,
            notes=candidate.notes,
            reminders_sent=False,
            created_at=self._clock(),
        )
        stored = await self.appointments.create(appointment)

        logger.info(
            f"Scheduled appointment {stored.id}: {stored.service} for client {stored.client_id} "
            f"with {stored.responsible_id} at {format_datetime(stored.starts_at, self.tz)}"
        )
        return SchedulingResult.success(stored)

    async def update_status(
        self,
        appointment: Appointment,
        new_status: Union[AppointmentStatus, str]
    ) -> SchedulingResult[Appointment]:
        """
        Move an appointment to ``new_status`` if the transition table allows it.

        The transition is checked against the caller's snapshot and again
        against the stored status, so a stale snapshot cannot move a stored
        appointment out of a terminal status.

        Returns:
            The stored appointment, or INVALID_TRANSITION / NOT_FOUND
        """
        try:
            target = AppointmentStatus(new_status)
        except ValueError:
            return SchedulingResult.failure(
                SchedulingErrorKind.INVALID_TRANSITION,
                f"Estado desconocido: {new_status}",
                status=str(new_status),
            )

        if not can_transition(appointment.status, target):
            return self._rejected_transition(appointment.id, appointment.status, target)

        if appointment.id is None:
            return self._not_stored()

        current = await self.appointments.get(appointment.id)
        if current is None:
            return self._gone(appointment.id)
        if current.status != appointment.status and not can_transition(current.status, target):
            return self._rejected_transition(appointment.id, current.status, target, stale=True)

        saved = await self.appointments.save(appointment.id, {"status": target})
        if saved is None:
            return self._gone(appointment.id)

        logger.info(f"Appointment {saved.id} status {current.status.value} -> {target.value}")
        return SchedulingResult.success(saved)

    async def mark_complete(self, appointment: Appointment) -> SchedulingResult[Appointment]:
        """Mark a confirmed appointment as completed."""
        return await self.update_status(appointment, AppointmentStatus.COMPLETED)

    async def update_details(
        self,
        appointment: Appointment,
        service: Optional[str] = None,
        notes: Optional[str] = None,
        reminders_sent: Optional[bool] = None
    ) -> SchedulingResult[Appointment]:
        """
        Edit the service, notes or reminders flag of a stored appointment.

        Only the given fields are written. Changing the service keeps the
        stored window; use ``reschedule`` to move it. Allowed in any status.

        Returns:
            The stored appointment, or INVALID_CANDIDATE / NOT_FOUND
        """
        updates: Dict[str, Any] = {}
        if service is not None:
            if not service.strip():
                return SchedulingResult.failure(
                    SchedulingErrorKind.INVALID_CANDIDATE,
                    "Faltan campos obligatorios: service",
                    fields=["service"],
                )
            updates["service"] = service
        if notes is not None:
            updates["notes"] = notes
        if reminders_sent is not None:
            updates["reminders_sent"] = reminders_sent

        if appointment.id is None:
            return self._not_stored()
        if not updates:
            return SchedulingResult.success(appointment)

        saved = await self.appointments.save(appointment.id, updates)
        if saved is None:
            return self._gone(appointment.id)

        logger.info(f"Updated appointment {saved.id}: {sorted(updates)}")
        return SchedulingResult.success(saved)

    async def mark_reminders_sent(self, appointment: Appointment) -> SchedulingResult[Appointment]:
        """Record that the client's reminders have been sent."""
        return await self.update_details(appointment, reminders_sent=True)

    async def reschedule(
        self,
        appointment: Appointment,
        new_start: datetime,
        new_end: Optional[datetime] = None,
        existing: Optional[List[Appointment]] = None
    ) -> SchedulingResult[Appointment]:
        """
        Move a stored appointment to a new window and save it.

        Without ``new_end`` the previous duration is kept. The new window is
        validated and, when enforcement is on, checked for overlaps ignoring
        the appointment itself. Only scheduled or confirmed appointments can
        be rescheduled.

        Returns:
            The stored appointment, or INVALID_TRANSITION, INVALID_WINDOW,
            OVERLAP_CONFLICT or NOT_FOUND
        """
        if not appointment.is_active:
            return SchedulingResult.failure(
                SchedulingErrorKind.INVALID_TRANSITION,
                f"No se puede reprogramar una cita en estado {appointment.status.value}",
                current=appointment.status,
            )
        if appointment.id is None:
            return self._not_stored()

        new_start = ensure_clinic_tz(new_start, self.tz)  # type: ignore[assignment]
        if new_end is not None:
            new_end = ensure_clinic_tz(new_end, self.tz)
            duration = self.resolve_duration(appointment.service, new_end, new_start)
            if not duration.ok:
                return SchedulingResult(error=duration.error)
            starts_at, ends_at = new_start, new_end
        else:
            moved = self.reschedule_start(appointment, new_start)
            starts_at, ends_at = moved.starts_at, moved.ends_at

        conflict = await self._overlap_error(
            appointment.responsible_id, starts_at, ends_at, existing, exclude_id=appointment.id
        )
        if conflict is not None:
            return conflict

        saved = await self.appointments.save(appointment.id, {"starts_at": starts_at, "ends_at": ends_at})
        if saved is None:
            return self._gone(appointment.id)

        logger.info(
            f"Rescheduled appointment {saved.id} to "
            f"{format_datetime(saved.starts_at, self.tz)} - {format_datetime(saved.ends_at, self.tz)}"
        )
        return SchedulingResult.success(saved)

    # ===== CALENDAR VIEWS =====

    def week_bucket(self, appointments: Iterable[Appointment], anchor: Union[date, datetime]) -> WeekBucket:
        """Monday-start week containing ``anchor`` on the engine's calendar."""
        return calendar_views.week_bucket(appointments, anchor, self.tz)

    def daily_stats(self, appointments: Iterable[Appointment], day: Union[date, datetime]) -> DailyStats:
        """Total, confirmed and completed counts for ``day``."""
        return calendar_views.daily_stats(appointments, day, self.tz)

    # ===== HELPERS =====

    async def _overlap_error(
        self,
        responsible_id: str,
        starts_at: datetime,
        ends_at: datetime,
        existing: Optional[List[Appointment]],
        exclude_id: Optional[str] = None
    ) -> Optional[SchedulingResult[Appointment]]:
        if not self.enforce_overlap:
            return None

        snapshot = existing if existing is not None else await self.appointments.list()
        conflicts = self.check_overlap(responsible_id, starts_at, ends_at, snapshot, exclude_id)
        if not conflicts:
            return None

        first = conflicts[0]
        logger.warning(
            f"Overlap for {responsible_id} at {format_datetime(starts_at, self.tz)}: "
            f"{len(conflicts)} conflicting appointment(s)"
        )
        return SchedulingResult.failure(
            SchedulingErrorKind.OVERLAP_CONFLICT,
            f"El horario se cruza con otra cita de {format_datetime(first.starts_at, self.tz)} "
            f"a {format_datetime(first.ends_at, self.tz)}",
            conflicting_ids=[a.id for a in conflicts],
        )

    @staticmethod
    def _not_stored() -> SchedulingResult[Appointment]:
        return SchedulingResult.failure(
            SchedulingErrorKind.NOT_FOUND,
            "La cita no ha sido guardada",
        )

    @staticmethod
    def _gone(appointment_id: str) -> SchedulingResult[Appointment]:
        logger.warning(f"Appointment {appointment_id} no longer exists")
        return SchedulingResult.failure(
            SchedulingErrorKind.NOT_FOUND,
            "Cita no encontrada",
            appointment_id=appointment_id,
        )

    @staticmethod
    def _rejected_transition(
        appointment_id: Optional[str],
        current: AppointmentStatus,
        target: AppointmentStatus,
        stale: bool = False
    ) -> SchedulingResult[Appointment]:
        logger.warning(
            f"Rejected status change for appointment {appointment_id}: "
            f"{current.value} -> {target.value}" + (" (stored status changed)" if stale else "")
        )
        return SchedulingResult.failure(
            SchedulingErrorKind.INVALID_TRANSITION,
            f"No se puede cambiar el estado de {current.value} a {target.value}",
            current=current,
            requested=target,
            allowed=sorted(s.value for s in allowed_transitions(current)),
            stale_snapshot=stale,
        )
