"""
Shared types for the scheduling engine.

Appointments and candidates are pydantic models so that values coming from
callers or storage are validated once at the boundary. Calendar views are
plain dataclasses and TypedDicts, and operation outcomes are reported through
SchedulingResult instead of exceptions.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar, TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from clinic_scheduler.utils.datetime_utils import ensure_clinic_tz


class AppointmentStatus(str, Enum):
    """Lifecycle status of an appointment."""
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Statuses that still occupy the responsible party's calendar
ACTIVE_STATUSES = frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED})

TERMINAL_STATUSES = frozenset({
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
    AppointmentStatus.NO_SHOW,
})


def _localize(value: Any) -> Any:
    # Naive datetimes are clinic-local wall time; aware ones keep their offset
    if isinstance(value, datetime) and value.tzinfo is None:
        return ensure_clinic_tz(value)
    return value


class Appointment(BaseModel):
    """
    A stored appointment.

    ``id`` is assigned by the persistence collaborator and is None only on
    values that have not been created yet. Instances are immutable; engine
    operations return updated copies.
    """
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    client_id: str
    client_display_name: str = ""
    service: str
    starts_at: datetime
    ends_at: datetime
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    responsible_id: str
    notes: str = ""
    reminders_sent: bool = False
    created_at: Optional[datetime] = None

    @field_validator("starts_at", "ends_at", "created_at", mode="before")
    @classmethod
    def localize_datetimes(cls, value: Any) -> Any:
        """Attach the clinic timezone to naive datetimes."""
        if isinstance(value, str):
            value = datetime.fromisoformat(value.replace('Z', '+00:00'))
        return _localize(value)

    @model_validator(mode="after")
    def check_window(self) -> "Appointment":
        """An appointment must end strictly after it starts."""
        if self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        return self

    @property
    def duration_minutes(self) -> int:
        """Length of the appointment window in whole minutes."""
        return int((self.ends_at - self.starts_at).total_seconds() // 60)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class AppointmentCandidate(BaseModel):
    """
    An appointment-shaped value that has not been accepted by the engine.

    ``ends_at_explicit`` records whether the caller chose the end time
    directly. Service changes only recompute ``ends_at`` while it is False.
    When a candidate is built with an ``ends_at`` and no flag, the end time
    is treated as explicit.

    Naive datetimes are kept naive here; the engine localizes them in its own
    calendar timezone.
    """
    model_config = ConfigDict(frozen=True)

    client_id: str = ""
    service: str = ""
    starts_at: datetime
    ends_at: Optional[datetime] = None
    ends_at_explicit: bool = False
    responsible_id: str = ""
    notes: str = ""

    @model_validator(mode="before")
    @classmethod
    def infer_explicit_end(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("ends_at") is not None and "ends_at_explicit" not in data:
            data = {**data, "ends_at_explicit": True}
        return data

    @field_validator("starts_at", "ends_at", mode="before")
    @classmethod
    def parse_datetimes(cls, value: Any) -> Any:
        """Accept ISO strings, including a trailing "Z" for UTC."""
        if isinstance(value, str):
            return datetime.fromisoformat(value.replace('Z', '+00:00'))
        return value


class ServiceCatalogEntry(BaseModel):
    """A service offered by the clinic and its default duration."""
    model_config = ConfigDict(frozen=True)

    service: str = Field(min_length=1)
    default_duration_minutes: int = Field(gt=0)


@dataclass
class DayBucket:
    """Appointments starting on one local calendar day, ascending by start."""
    day: date
    appointments: List[Appointment] = field(default_factory=list)


@dataclass
class WeekBucket:
    """Monday-start, seven-day grouping of appointments for calendar display."""
    week_start: date
    days: List[DayBucket] = field(default_factory=list)

    @property
    def week_end(self) -> date:
        return self.days[-1].day if self.days else self.week_start

    def for_day(self, day: date) -> List[Appointment]:
        """Appointments of ``day``, or an empty list when the day is outside the week."""
        for bucket in self.days:
            if bucket.day == day:
                return bucket.appointments
        return []

    def all_appointments(self) -> List[Appointment]:
        return [appointment for bucket in self.days for appointment in bucket.appointments]


class DailyStats(TypedDict):
    """Appointment counts for a single day."""
    total: int
    confirmed: int
    completed: int


class SchedulingErrorKind(str, Enum):
    """Kinds of expected scheduling failures."""
    INVALID_WINDOW = "invalid_window"
    INVALID_TRANSITION = "invalid_transition"
    OVERLAP_CONFLICT = "overlap_conflict"
    NOT_FOUND = "not_found"
    INVALID_CANDIDATE = "invalid_candidate"


@dataclass(frozen=True)
class SchedulingError:
    """An expected validation failure with a human-readable message."""
    kind: SchedulingErrorKind
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class SchedulingFailure(Exception):
    """Raised by SchedulingResult.unwrap() when the result holds an error."""

    def __init__(self, error: SchedulingError):
        super().__init__(error.message)
        self.error = error

    @property
    def kind(self) -> SchedulingErrorKind:
        return self.error.kind


T = TypeVar("T")


@dataclass(frozen=True)
class SchedulingResult(Generic[T]):
    """Outcome of a scheduling operation: either a value or a SchedulingError."""
    value: Optional[T] = None
    error: Optional[SchedulingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "SchedulingResult[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: SchedulingErrorKind,
        message: str,
        **details: Any
    ) -> "SchedulingResult[T]":
        return cls(error=SchedulingError(kind=kind, message=message, details=details))

    def unwrap(self) -> T:
        """
        Return the value or raise SchedulingFailure.

        Raises:
            SchedulingFailure: If the result holds an error
        """
        if self.error is not None:
            raise SchedulingFailure(self.error)
        return self.value  # type: ignore[return-value]
