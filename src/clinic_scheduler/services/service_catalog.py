"""
Service catalog for default appointment durations.

The catalog is static configuration: it maps each service name to the number
of minutes an appointment lasts when the caller gives no explicit end time.
The engine only reads it.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from sqlalchemy.orm import Session

from clinic_scheduler.core.constants import DEFAULT_SERVICE_DURATIONS, FALLBACK_DURATION_MINUTES
from clinic_scheduler.models import ServiceType
from clinic_scheduler.shared_types.scheduling import ServiceCatalogEntry

logger = logging.getLogger(__name__)


class ServiceCatalog:
    """
    Read-only mapping of service name to default duration in minutes.

    Unknown services resolve to ``fallback_minutes`` (60 by default).
    """

    def __init__(
        self,
        entries: Iterable[ServiceCatalogEntry] = (),
        fallback_minutes: int = FALLBACK_DURATION_MINUTES
    ):
        if fallback_minutes <= 0:
            raise ValueError("fallback_minutes must be positive")
        self._entries: Dict[str, ServiceCatalogEntry] = {}
        for entry in entries:
            if entry.service in self._entries:
                raise ValueError(f"Duplicate service in catalog: {entry.service}")
            self._entries[entry.service] = entry
        self.fallback_minutes = fallback_minutes

    @classmethod
    def from_mapping(
        cls,
        durations: Mapping[str, int],
        fallback_minutes: int = FALLBACK_DURATION_MINUTES
    ) -> "ServiceCatalog":
        """Build a catalog from ``{service: minutes}``."""
        return cls(
            (ServiceCatalogEntry(service=name, default_duration_minutes=minutes)
             for name, minutes in durations.items()),
            fallback_minutes=fallback_minutes,
        )

    @classmethod
    def default(cls) -> "ServiceCatalog":
        """The clinic's standard service list."""
        return cls.from_mapping(DEFAULT_SERVICE_DURATIONS)

    def get(self, service: str) -> Optional[ServiceCatalogEntry]:
        return self._entries.get(service)

    def duration_for(self, service: str) -> int:
        """Catalog duration of ``service``, or the fallback when it is not listed."""
        entry = self._entries.get(service)
        if entry is None:
            logger.debug(f"Service '{service}' not in catalog, using {self.fallback_minutes} minutes")
            return self.fallback_minutes
        return entry.default_duration_minutes

    def services(self) -> List[str]:
        """Service names in catalog order."""
        return list(self._entries)

    def __contains__(self, service: object) -> bool:
        return service in self._entries

    def __iter__(self) -> Iterator[ServiceCatalogEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


def load_service_catalog(db: Session, fallback_minutes: int = FALLBACK_DURATION_MINUTES) -> ServiceCatalog:
    """
    Load the catalog from the ``service_types`` table.

    Args:
        db: Database session
        fallback_minutes: Duration for services missing from the table

    Returns:
        ServiceCatalog ordered by display order, then name
    """
    rows = db.query(ServiceType).order_by(ServiceType.display_order, ServiceType.name).all()
    return ServiceCatalog(
        (ServiceCatalogEntry(service=row.name, default_duration_minutes=row.default_duration_minutes)
         for row in rows),
        fallback_minutes=fallback_minutes,
    )


def seed_service_catalog(db: Session, durations: Mapping[str, int] = DEFAULT_SERVICE_DURATIONS) -> int:
    """
    Insert catalog rows for services that are not stored yet.

    Existing rows are left untouched so configured durations survive re-seeding.

    Returns:
        Number of rows inserted
    """
    existing = {name for (name,) in db.query(ServiceType.name).all()}
    inserted = 0
    for order, (name, minutes) in enumerate(durations.items()):
        if name in existing:
            continue
        db.add(ServiceType(name=name, default_duration_minutes=minutes, display_order=order))
        inserted += 1
    db.flush()
    logger.info(f"Seeded {inserted} service types ({len(existing)} already present)")
    return inserted
