"""
Test configuration and fixtures for the datasource store tests.
Every test gets its own in-memory SQLite database.
"""
import os

os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from datasource_store.database import Base, create_session_factory
from datasource_store.models.data_source import DataSource  # noqa: F401
from datasource_store.services.data_source_store import DataSourceStore
from datasource_store.services.event_bus import EventBus
from datasource_store.services.metrics_service import MetricsService

# Test database URL (SQLite in-memory for fast testing)
SQLALCHEMY_DATABASE_URL = "sqlite://"


@pytest.fixture
def db_engine():
    """Create a fresh in-memory database with all tables"""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory bound to the test database"""
    return create_session_factory(db_engine)


@pytest.fixture
def db_session(session_factory):
    """Session used by factories to seed rows"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def published_events():
    """Events delivered by the event bus, in order"""
    return []


@pytest.fixture
def event_bus(published_events):
    """Event bus recording every delivered event"""
    bus = EventBus()
    bus.subscribe(published_events.append)
    return bus


@pytest.fixture
def metrics():
    """Fresh metrics registry with counters enabled"""
    MetricsService._instance = None
    service = MetricsService.instance()
    service._enabled = True
    yield service
    MetricsService._instance = None


@pytest.fixture
def store(session_factory, event_bus, metrics):
    """Store wired to the test database and recording event bus"""
    return DataSourceStore(session_factory=session_factory, event_bus=event_bus, metrics=metrics)
