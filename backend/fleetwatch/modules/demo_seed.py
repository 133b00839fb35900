"""Seed a local store with demo boats for the dashboard.

Boats and scenarios:
  BOAT-001 (MBCA 10231): drifting off Nasugbu, normal
  BOAT-002 (MBCA 10232): returning to Calatagan, normal
  BOAT-003 (MBCA 10233): off Lian; distressed when seeded with distress=True
  BOAT-004 (MBCA 10234): registered but never reported a position

Each reporting boat gets a track spread over the last three days so the
track date filter has more than one calendar day to choose from.

Usage:
    fleetwatch seed-demo [--distress]
"""
from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from fleetwatch.models.boat import BoatInfo
from fleetwatch.models.boat_location import BoatCurrentLocation
from fleetwatch.models.boat_log import BoatLocationLog

logger = logging.getLogger(__name__)

DEMO_BOATS = [
    # boat_id, name, registration, start lat, start lon, heading (dlat, dlon per hour)
    ("BOAT-001", "Bangka Maria", "MBCA 10231", 14.0712, 120.5811, (0.002, -0.003)),
    ("BOAT-002", "Tala ng Dagat", "MBCA 10232", 13.9215, 120.5902, (-0.001, 0.002)),
    ("BOAT-003", "San Roque", "MBCA 10233", 14.0251, 120.6104, (0.003, 0.001)),
    ("BOAT-004", "Perlas", "MBCA 10234", None, None, None),
]
DISTRESS_BOAT_ID = "BOAT-003"
TRACK_DAYS = 3
POINTS_PER_DAY = 6


def _track(lat: float, lon: float, step: tuple[float, float], start: datetime, rng: random.Random):
    points = []
    for day in range(TRACK_DAYS):
        for i in range(POINTS_PER_DAY):
            recorded = start + timedelta(days=day, hours=6 + i * 2)
            lat += step[0] + rng.uniform(-0.0005, 0.0005)
            lon += step[1] + rng.uniform(-0.0005, 0.0005)
            points.append((round(lat, 6), round(lon, 6), recorded))
    return points


def seed_demo_data(db: Session, distress: bool = False, now: datetime | None = None) -> dict:
    """Insert the demo fleet. Boats already present are left untouched.

    Timestamps are stored as naive UTC, matching how the store is read.
    Returns counts of inserted rows.
    """
    rng = random.Random(42)
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).replace(tzinfo=None)
    start = now.replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=TRACK_DAYS - 1)

    inserted = {"boats": 0, "locations": 0, "logs": 0}
    for boat_id, name, registration, lat, lon, step in DEMO_BOATS:
        if db.get(BoatInfo, boat_id) is not None:
            logger.info("Demo boat %s already present, skipping", boat_id)
            continue
        db.add(BoatInfo(boat_id=boat_id, boat_name=name, registration_number=registration))
        inserted["boats"] += 1
        if lat is None:
            continue

        points = [p for p in _track(lat, lon, step, start, rng) if p[2] <= now]
        for p_lat, p_lon, recorded in points:
            db.add(BoatLocationLog(boat_id=boat_id, latitude=p_lat, longitude=p_lon, recorded_at=recorded))
        inserted["logs"] += len(points)

        last_lat, last_lon, last_seen = points[-1] if points else (lat, lon, now)
        db.add(BoatCurrentLocation(
            boat_id=boat_id,
            latitude=last_lat,
            longitude=last_lon,
            last_updated=last_seen,
            is_distress=distress and boat_id == DISTRESS_BOAT_ID,
        ))
        inserted["locations"] += 1

    db.commit()
    logger.info(
        "Seeded %d boats, %d current locations, %d log points",
        inserted["boats"], inserted["locations"], inserted["logs"],
    )
    return inserted


def set_distress(db: Session, boat_id: str, distressed: bool) -> bool:
    """Flip the distress flag on a boat's current location. False if it has none."""
    loc = db.query(BoatCurrentLocation).filter(BoatCurrentLocation.boat_id == boat_id).first()
    if loc is None:
        return False
    loc.is_distress = distressed
    loc.last_updated = datetime.now(timezone.utc).replace(tzinfo=None)
    db.commit()
    return True
