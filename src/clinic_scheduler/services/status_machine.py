"""
Appointment status transitions.

Appointments start as ``scheduled``. They can be confirmed, and an active
appointment can end as completed (confirmed only), cancelled or no-show.
Completed, cancelled and no-show are terminal.
"""

from typing import Dict, FrozenSet, Union

from clinic_scheduler.shared_types.scheduling import AppointmentStatus

ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    }),
    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    }),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}


def allowed_transitions(status: Union[AppointmentStatus, str]) -> FrozenSet[AppointmentStatus]:
    """Statuses reachable in one step from ``status``."""
    return ALLOWED_TRANSITIONS[AppointmentStatus(status)]


def can_transition(
    current: Union[AppointmentStatus, str],
    new: Union[AppointmentStatus, str]
) -> bool:
    """Whether moving from ``current`` to ``new`` is allowed."""
    return AppointmentStatus(new) in allowed_transitions(current)


def is_terminal(status: Union[AppointmentStatus, str]) -> bool:
    return not allowed_transitions(status)
