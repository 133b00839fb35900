"""Read-only client for the boat-state store.

The store holds three tables (see ``fleetwatch.models``): the boat registry,
one current-location row per boat, and the historical location log. The
dashboard never writes to them; every method here opens a short-lived
session, runs one query, and returns typed rows.

Usage:
    from fleetwatch.modules.location_store import LocationStore
    store = LocationStore()
    snapshot = store.fetch_current_locations()
"""
from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fleetwatch.models.boat import BoatInfo
from fleetwatch.models.boat_location import BoatCurrentLocation
from fleetwatch.models.boat_log import BoatLocationLog
from fleetwatch.schemas.boat import BoatIdentity, BoatSummary, BoatTrackPoint

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A store query failed (connection, SQL or mapping error)."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


class LocationStore:
    def __init__(self, session_factory: Callable[[], Session] | None = None):
        if session_factory is None:
            from fleetwatch.database import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory

    def fetch_current_locations(self) -> list[BoatSummary]:
        """Current position of every boat, newest ``last_updated`` first.

        The registration number comes from an outer join on the registry, so
        a location row whose boat is missing from the registry still appears
        with an empty registration number.
        """
        db = self._session_factory()
        try:
            rows = (
                db.query(BoatCurrentLocation, BoatInfo.registration_number)
                .outerjoin(BoatInfo, BoatInfo.boat_id == BoatCurrentLocation.boat_id)
                .order_by(BoatCurrentLocation.last_updated.desc())
                .all()
            )
            return [
                BoatSummary(
                    id=loc.id,
                    boat_id=loc.boat_id,
                    registration_number=registration,
                    last_updated=loc.last_updated,
                    latitude=loc.latitude,
                    longitude=loc.longitude,
                    is_distress=bool(loc.is_distress),
                )
                for loc, registration in rows
            ]
        except SQLAlchemyError as exc:
            raise StoreError("fetch_current_locations", exc) from exc
        finally:
            db.close()

    def fetch_boat_count(self) -> int:
        """Exact number of registered boats."""
        db = self._session_factory()
        try:
            return db.query(func.count(BoatInfo.boat_id)).scalar() or 0
        except SQLAlchemyError as exc:
            raise StoreError("fetch_boat_count", exc) from exc
        finally:
            db.close()

    def fetch_boat_registry(self) -> list[BoatIdentity]:
        db = self._session_factory()
        try:
            boats = db.query(BoatInfo).all()
            return [BoatIdentity.model_validate(b) for b in boats]
        except SQLAlchemyError as exc:
            raise StoreError("fetch_boat_registry", exc) from exc
        finally:
            db.close()

    def fetch_logs_for_boat(self, boat_id: str) -> list[BoatTrackPoint]:
        """All logged positions for one boat, ascending by ``recorded_at``."""
        db = self._session_factory()
        try:
            logs = (
                db.query(BoatLocationLog)
                .filter(BoatLocationLog.boat_id == boat_id)
                .order_by(BoatLocationLog.recorded_at.asc(), BoatLocationLog.log_id.asc())
                .all()
            )
            return [BoatTrackPoint.model_validate(log) for log in logs]
        except SQLAlchemyError as exc:
            raise StoreError("fetch_logs_for_boat", exc) from exc
        finally:
            db.close()
