"""Shared test fixtures: in-memory store, seeded store and API client."""
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fleetwatch.models import Base
from fleetwatch.models.boat import BoatInfo
from fleetwatch.models.boat_location import BoatCurrentLocation
from fleetwatch.models.boat_log import BoatLocationLog
from fleetwatch.modules.geolocation import NoGeolocation
from fleetwatch.modules.location_store import LocationStore


@pytest.fixture
def db_session_factory():
    """Session factory over a single shared in-memory SQLite connection.

    StaticPool keeps one connection so worker threads (asyncio.to_thread)
    see the same database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    yield factory
    engine.dispose()


@pytest.fixture
def db_session(db_session_factory):
    session = db_session_factory()
    yield session
    session.close()


@pytest.fixture
def seeded_session_factory(db_session_factory):
    """Three registered boats, two reporting (one distressed), one with a track."""
    db = db_session_factory()
    db.add_all([
        BoatInfo(boat_id="B1", boat_name="Alpha", registration_number="REG-1"),
        BoatInfo(boat_id="B2", boat_name="Bravo", registration_number="REG-2"),
        BoatInfo(boat_id="B3", boat_name="Charlie", registration_number=None),
    ])
    db.add_all([
        BoatCurrentLocation(boat_id="B1", latitude=14.1, longitude=120.6,
                            last_updated=datetime(2025, 3, 1, 10, 0), is_distress=False),
        BoatCurrentLocation(boat_id="B2", latitude=14.2, longitude=120.7,
                            last_updated=datetime(2025, 3, 1, 11, 0), is_distress=True),
    ])
    # Inserted out of order on purpose
    db.add_all([
        BoatLocationLog(boat_id="B1", latitude=14.02, longitude=120.52, recorded_at=datetime(2025, 3, 2, 8, 0)),
        BoatLocationLog(boat_id="B1", latitude=14.00, longitude=120.50, recorded_at=datetime(2025, 3, 1, 8, 0)),
        BoatLocationLog(boat_id="B1", latitude=14.01, longitude=120.51, recorded_at=datetime(2025, 3, 1, 9, 0)),
    ])
    db.commit()
    db.close()
    return db_session_factory


@pytest.fixture
def seeded_store(seeded_session_factory):
    return LocationStore(seeded_session_factory)


@pytest.fixture
def mock_db():
    """MagicMock database session for the health endpoint."""
    return MagicMock()


@pytest.fixture
def runtime(seeded_store):
    """A runtime over the seeded store; not started, so nothing polls on its own."""
    from fleetwatch.modules.runtime import DashboardRuntime
    return DashboardRuntime(store=seeded_store, geolocation=NoGeolocation())


@pytest.fixture
def api_client(runtime, mock_db):
    """TestClient with the runtime installed and the DB dependency overridden.

    The client is not used as a context manager, so the application lifespan
    (which would start a real runtime) does not run.
    """
    from fleetwatch.database import get_db
    from fleetwatch.main import app

    def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    app.state.runtime = runtime
    client = TestClient(app, raise_server_exceptions=False)
    yield client
    app.state.runtime = None
    app.dependency_overrides.clear()

