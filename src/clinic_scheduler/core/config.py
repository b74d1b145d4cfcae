"""
Scheduler configuration using python-dotenv.

This module loads environment variables from a .env file into os.environ
and exposes the values used by the scheduling engine and its adapters.
"""

import os
import pathlib
from dotenv import load_dotenv


# Don't load .env file during testing to ensure predictable test behavior
is_testing = os.getenv("PYTEST_VERSION") is not None or any("pytest" in str(frame) for frame in __import__('inspect').stack(0))

if not is_testing:
    possible_paths = [
        pathlib.Path(__file__).parent.parent.parent.parent / ".env",  # project root (src layout)
        pathlib.Path.cwd() / ".env",  # .env in current directory
        pathlib.Path.cwd().parent / ".env",  # .env in parent directory
    ]

    for env_path in possible_paths:
        if env_path.exists():
            load_dotenv(env_path)
            break


def _get_bool(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment ("1", "true", "yes", "on")."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_database_url():
    """Get the database URL from environment."""
    return os.getenv(
        "DATABASE_URL",
        "sqlite:///./clinic_scheduler.db"
    )

DATABASE_URL = get_database_url()

# Local calendar used for day bucketing and for interpreting naive datetimes
CLINIC_TIMEZONE = os.getenv("CLINIC_TIMEZONE", "America/Mexico_City")

# Duration used when a service is missing from the catalog or a window has no usable duration
DEFAULT_APPOINTMENT_DURATION_MINUTES = int(os.getenv("DEFAULT_APPOINTMENT_DURATION_MINUTES", "60"))

# Reject overlapping appointments for the same responsible party
ENFORCE_OVERLAP_CHECK = _get_bool("ENFORCE_OVERLAP_CHECK", False)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
