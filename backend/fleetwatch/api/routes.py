from __future__ import annotations

import logging
import time
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from fleetwatch.config import VERSION
from fleetwatch.database import get_db
from fleetwatch.modules.dashboard_view import build_track_view
from fleetwatch.modules.geolocation import FixedGeolocation
from fleetwatch.modules.location_store import StoreError
from fleetwatch.modules.runtime import DashboardRuntime
from fleetwatch.modules.track_filter import TrackFilter
from fleetwatch.modules.weather_client import load_viewer_weather
from fleetwatch.schemas.alerts import AlertBoardRead
from fleetwatch.schemas.boat import BoatIdentity
from fleetwatch.schemas.dashboard import CurrentBoatsRead, DashboardView, TrackView
from fleetwatch.schemas.weather import WeatherSnapshot

logger = logging.getLogger(__name__)

router = APIRouter()


def get_runtime(request: Request) -> DashboardRuntime:
    """The dashboard runtime started by the application lifespan."""
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(status_code=503, detail="Dashboard runtime not started")
    return runtime


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

@router.get("/dashboard", response_model=DashboardView, tags=["dashboard"])
def get_dashboard(runtime: DashboardRuntime = Depends(get_runtime)):
    """Summary cards, boat table, live map and distress banner."""
    return runtime.view()


@router.get("/boats", response_model=list[BoatIdentity], tags=["boats"])
def list_boats(runtime: DashboardRuntime = Depends(get_runtime)):
    try:
        return runtime.store.fetch_boat_registry()
    except StoreError as exc:
        logger.error("Error fetching boat registry: %s", exc)
        return []


@router.get("/boats/count", tags=["boats"])
def count_boats(runtime: DashboardRuntime = Depends(get_runtime)):
    try:
        registered = runtime.store.fetch_boat_count()
    except StoreError as exc:
        logger.error("Error fetching registered boats: %s", exc)
        registered = 0
    return {"registered": registered}


@router.get("/boats/current", response_model=CurrentBoatsRead, tags=["boats"])
def get_current_boats(runtime: DashboardRuntime = Depends(get_runtime)):
    """The poller's latest snapshot. Empty after a failed poll."""
    state = runtime.poller.state
    return CurrentBoatsRead(
        boats=list(state.snapshot),
        distressed=runtime.monitor.state.distressed,
        loading=state.loading,
        refreshed_at=state.refreshed_at,
    )


@router.get("/boats/{boat_id}/track", response_model=TrackView, tags=["track"])
def get_boat_track(
    boat_id: str,
    day: Optional[date] = Query(None, alias="date"),
    tz: Optional[str] = Query(None, description="'local', 'UTC' or an IANA zone name"),
    runtime: DashboardRuntime = Depends(get_runtime),
):
    """Historical track of one boat, optionally limited to one calendar day."""
    try:
        registry = runtime.store.fetch_boat_registry()
    except StoreError as exc:
        logger.error("Error fetching boat registry: %s", exc)
        boat = BoatIdentity(boat_id=boat_id)
    else:
        boat = next((b for b in registry if b.boat_id == boat_id), None)
        if boat is None:
            raise HTTPException(status_code=404, detail="Boat not found")

    track = TrackFilter(runtime.store, tz_name=tz)
    track.select_boat(boat)
    if day is not None:
        track.filter_by_date(day.isoformat())
    return build_track_view(track.state, track.tz)


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------

@router.get("/alerts/distress", response_model=AlertBoardRead, tags=["alerts"])
def get_distress_alerts(runtime: DashboardRuntime = Depends(get_runtime)):
    return runtime.alert_board.read()


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------

@router.get("/weather", response_model=Optional[WeatherSnapshot], tags=["weather"])
async def get_weather(
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    runtime: DashboardRuntime = Depends(get_runtime),
):
    """Current weather at the given position, or at the viewer's position.

    Returns ``null`` when the position is unknown or the lookup failed.
    """
    if latitude is None or longitude is None:
        return runtime.weather
    return await load_viewer_weather(FixedGeolocation(latitude, longitude))


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------

@router.get("/health", tags=["system"])
def health_check(db: Session = Depends(get_db)):
    """Health check with DB latency measurement."""
    t0 = time.time()
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {e}"
    latency_ms = round((time.time() - t0) * 1000, 1)

    return {
        "status": "ok",
        "version": VERSION,
        "database": {"status": db_status, "latency_ms": latency_ms},
    }
