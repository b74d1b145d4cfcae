"""
Unit tests for the service catalog.
"""

import pytest
from pydantic import ValidationError

from clinic_scheduler.core.constants import DEFAULT_SERVICE_DURATIONS
from clinic_scheduler.services.service_catalog import ServiceCatalog
from clinic_scheduler.shared_types.scheduling import ServiceCatalogEntry


class TestDefaultCatalog:
    """Test the clinic's standard services."""

    @pytest.mark.parametrize("service,minutes", [
        ("Consulta Inicial", 30),
        ("Limpieza Facial", 60),
        ("Peeling Químico", 45),
        ("Tratamiento Antienvejecimiento", 90),
    ])
    def test_known_durations(self, catalog, service, minutes):
        assert catalog.duration_for(service) == minutes

    def test_unknown_service_uses_fallback(self, catalog):
        assert "Masaje Relajante" not in catalog
        assert catalog.duration_for("Masaje Relajante") == 60

    def test_lists_all_default_services(self, catalog):
        assert catalog.services() == list(DEFAULT_SERVICE_DURATIONS)
        assert len(catalog) == len(DEFAULT_SERVICE_DURATIONS)


class TestCustomCatalog:
    """Test catalogs configured by the caller."""

    def test_from_mapping(self):
        catalog = ServiceCatalog.from_mapping({"Consulta": 20}, fallback_minutes=15)

        assert catalog.duration_for("Consulta") == 20
        assert catalog.duration_for("Otro") == 15
        assert catalog.get("Consulta") == ServiceCatalogEntry(service="Consulta", default_duration_minutes=20)
        assert catalog.get("Otro") is None

    def test_iteration_yields_entries(self):
        catalog = ServiceCatalog.from_mapping({"A": 10, "B": 20})

        assert [(e.service, e.default_duration_minutes) for e in catalog] == [("A", 10), ("B", 20)]

    def test_duplicate_service_rejected(self):
        entry = ServiceCatalogEntry(service="A", default_duration_minutes=10)

        with pytest.raises(ValueError, match="Duplicate service"):
            ServiceCatalog([entry, entry])

    @pytest.mark.parametrize("fallback", [0, -5])
    def test_non_positive_fallback_rejected(self, fallback):
        with pytest.raises(ValueError):
            ServiceCatalog(fallback_minutes=fallback)

    @pytest.mark.parametrize("minutes", [0, -30])
    def test_non_positive_duration_rejected(self, minutes):
        with pytest.raises(ValidationError):
            ServiceCatalog.from_mapping({"A": minutes})

    def test_empty_service_name_rejected(self):
        with pytest.raises(ValidationError):
            ServiceCatalogEntry(service="", default_duration_minutes=30)
