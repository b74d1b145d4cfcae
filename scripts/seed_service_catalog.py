"""
Create the scheduler tables and seed the default service catalog.

Uses DATABASE_URL from the environment (or .env). Existing service rows are
kept, so the script can be re-run after durations were edited.

Usage:
    python scripts/seed_service_catalog.py
"""
import logging
import sys

from clinic_scheduler.core.database import create_tables, get_db_context
from clinic_scheduler.core.log_config import configure_logging
from clinic_scheduler.services.service_catalog import load_service_catalog, seed_service_catalog

logger = logging.getLogger(__name__)


def main():
    configure_logging()
    try:
        create_tables()
        with get_db_context() as db:
            inserted = seed_service_catalog(db)
            catalog = load_service_catalog(db)
        logger.info(f"Service catalog ready: {len(catalog)} services ({inserted} new)")
        for entry in catalog:
            logger.info(f"  {entry.service}: {entry.default_duration_minutes} min")
    except Exception as e:
        logger.exception(f"Error seeding service catalog: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
