"""
Test configuration and shared fixtures for the clinic scheduler test suite.

Engine tests run against the in-memory collaborators. SQLAlchemy adapter tests
use a fresh in-memory SQLite database per test, so every test starts from an
empty schema.
"""

import itertools
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from clinic_scheduler.core.database import Base
from clinic_scheduler.models import AppointmentRecord, Client, ServiceType  # noqa: F401
from clinic_scheduler.services.repositories import (
    InMemoryAppointmentRepository,
    InMemoryClientDirectory,
)
from clinic_scheduler.services.scheduling_engine import SchedulingEngine
from clinic_scheduler.services.service_catalog import ServiceCatalog
from tests.utils import TZ, at


@pytest.fixture
def catalog() -> ServiceCatalog:
    """The clinic's default service catalog."""
    return ServiceCatalog.default()


@pytest.fixture
def repository() -> InMemoryAppointmentRepository:
    """In-memory appointment store with predictable ids (apt-1, apt-2, ...)."""
    counter = itertools.count(1)
    return InMemoryAppointmentRepository(id_factory=lambda: f"apt-{next(counter)}")


@pytest.fixture
def clients() -> InMemoryClientDirectory:
    """Client directory with two known clients."""
    return InMemoryClientDirectory({
        "c1": "Ana López",
        "c2": "María García",
    })


@pytest.fixture
def fixed_now():
    """Frozen 'now' used as created_at."""
    return at(2025, 1, 9, 8, 0)


@pytest.fixture
def engine(catalog, repository, clients, fixed_now) -> SchedulingEngine:
    """Engine with the default configuration: overlaps are allowed."""
    return SchedulingEngine(
        catalog=catalog,
        appointments=repository,
        clients=clients,
        enforce_overlap=False,
        tz=TZ,
        clock=lambda: fixed_now,
    )


@pytest.fixture
def strict_engine(catalog, repository, clients, fixed_now) -> SchedulingEngine:
    """Engine with overlap rejection enabled."""
    return SchedulingEngine(
        catalog=catalog,
        appointments=repository,
        clients=clients,
        enforce_overlap=True,
        tz=TZ,
        clock=lambda: fixed_now,
    )


@pytest.fixture
def db_engine():
    """
    In-memory SQLite engine shared by one test.

    StaticPool keeps the single connection alive so the schema survives
    between sessions.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> sessionmaker:
    """Session factory for the SQL adapters, bound to the test's SQLite engine."""
    return sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session bound to the test's SQLite engine."""
    SessionFactory = sessionmaker(bind=db_engine, autoflush=False)
    session = SessionFactory()

    yield session

    session.rollback()
    session.close()
