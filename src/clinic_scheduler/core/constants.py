"""Scheduling constants and the default service catalog."""

from clinic_scheduler.core.config import DEFAULT_APPOINTMENT_DURATION_MINUTES

# Database field lengths
MAX_STRING_LENGTH = 255
MAX_NOTES_LENGTH = 1000

# Database connection settings
DB_POOL_RECYCLE_SECONDS = 300  # 5 minutes

# Fallback duration for services missing from the catalog
FALLBACK_DURATION_MINUTES = DEFAULT_APPOINTMENT_DURATION_MINUTES

# Calendar settings
DAYS_PER_WEEK = 7
WEEK_START_WEEKDAY = 0  # Monday (datetime.weekday())

# Number of appointments shown in "upcoming" lists
UPCOMING_APPOINTMENTS_LIMIT = 5

# Services offered by the clinic with their default duration in minutes.
# Services without a specific duration use the fallback duration.
DEFAULT_SERVICE_DURATIONS = {
    "Limpieza Facial": 60,
    "Peeling Químico": 45,
    "Hidratación Profunda": FALLBACK_DURATION_MINUTES,
    "Microdermoabrasión": FALLBACK_DURATION_MINUTES,
    "Tratamiento Antienvejecimiento": 90,
    "Depilación Láser": FALLBACK_DURATION_MINUTES,
    "Tratamiento para Acné": FALLBACK_DURATION_MINUTES,
    "Masaje Facial": FALLBACK_DURATION_MINUTES,
    "Consulta Inicial": 30,
    "Seguimiento": FALLBACK_DURATION_MINUTES,
}
