"""Track filter - fetch one boat's historical track and slice it by calendar day.

The full log and the displayed subset are two views over the same ordered
sequence: ``filtered`` is always a subsequence of ``logs`` in the same order,
and after ``filter_by_date(day)`` it holds exactly the points whose calendar
day equals ``day``. Logs are kept in the order the store returned them
(ascending ``recorded_at``); nothing here re-sorts them.

Calendar days are computed in a configurable zone (``TRACK_DAY_TIMEZONE``):
"local" uses the runtime's local zone, "UTC" or any IANA name pins it.

Provides pure state transitions (select_boat, filter_by_date, clear_filter)
over an immutable ``TrackState`` and a small stateful ``TrackFilter``
wrapper for callers that want to hold one track at a time.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone, tzinfo
from typing import Callable, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fleetwatch.config import settings
from fleetwatch.modules.location_store import StoreError
from fleetwatch.schemas.boat import BoatIdentity, BoatTrackPoint
from fleetwatch.schemas.dashboard import DateRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackState:
    boat: BoatIdentity | None = None
    logs: tuple[BoatTrackPoint, ...] = ()
    filtered: tuple[BoatTrackPoint, ...] = ()
    selected_date: str = ""
    error: str | None = None


def resolve_day_timezone(name: str | None = None) -> tzinfo | None:
    """Map a zone name to a tzinfo. ``None`` means the runtime's local zone."""
    name = (name if name is not None else settings.TRACK_DAY_TIMEZONE).strip()
    if not name or name.lower() == "local":
        return None
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone for track days: {name!r}") from exc


def calendar_day(ts: datetime, tz: tzinfo | None = None) -> str:
    """``YYYY-MM-DD`` of *ts* in *tz* (local zone when ``None``)."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(tz).date().isoformat()


def select_boat(
    state: TrackState,
    boat: BoatIdentity,
    fetch_logs: Callable[[str], Sequence[BoatTrackPoint]],
) -> TrackState:
    """Replace any previous track with *boat*'s full log, unfiltered.

    A fetch error leaves an empty track (both views) and is logged.
    """
    try:
        logs = tuple(fetch_logs(boat.boat_id))
    except StoreError as exc:
        logger.error("Error fetching logs for boat %s: %s", boat.boat_id, exc)
        return TrackState(boat=boat, error=str(exc))

    if not logs:
        logger.info("No logs found for boat_id: %s", boat.boat_id)
    else:
        logger.debug("Fetched %d log points for boat %s", len(logs), boat.boat_id)
    return TrackState(boat=boat, logs=logs, filtered=logs)


def filter_by_date(state: TrackState, day: str, tz: tzinfo | None = None) -> TrackState:
    """Keep only points whose calendar day equals *day*; empty *day* shows all."""
    if not day:
        return clear_filter(state)
    filtered = tuple(p for p in state.logs if calendar_day(p.recorded_at, tz) == day)
    return replace(state, filtered=filtered, selected_date=day)


def clear_filter(state: TrackState) -> TrackState:
    return replace(state, filtered=state.logs, selected_date="")


def available_dates(logs: Sequence[BoatTrackPoint], tz: tzinfo | None = None) -> list[str]:
    """Distinct calendar days present in *logs*, ascending."""
    return sorted({calendar_day(p.recorded_at, tz) for p in logs})


def date_range(logs: Sequence[BoatTrackPoint], tz: tzinfo | None = None) -> DateRange | None:
    if not logs:
        return None
    earliest = min(p.recorded_at for p in logs)
    latest = max(p.recorded_at for p in logs)
    return DateRange(
        min=date.fromisoformat(calendar_day(earliest, tz)),
        max=date.fromisoformat(calendar_day(latest, tz)),
    )


class TrackFilter:
    """Holds the track of the currently selected boat.

    Selecting a new boat discards the previous boat's logs and filter; there
    is no cache of previously viewed boats.
    """

    def __init__(self, store, tz: tzinfo | None = None, tz_name: str | None = None):
        self.store = store
        self.tz = tz if tz is not None else resolve_day_timezone(tz_name)
        self.state = TrackState()

    @property
    def logs(self) -> tuple[BoatTrackPoint, ...]:
        return self.state.logs

    @property
    def filtered(self) -> tuple[BoatTrackPoint, ...]:
        return self.state.filtered

    def select_boat(self, boat: BoatIdentity) -> TrackState:
        self.state = select_boat(TrackState(), boat, self.store.fetch_logs_for_boat)
        return self.state

    def filter_by_date(self, day: str) -> TrackState:
        self.state = filter_by_date(self.state, day, self.tz)
        return self.state

    def clear_filter(self) -> TrackState:
        self.state = clear_filter(self.state)
        return self.state

    def available_dates(self) -> list[str]:
        return available_dates(self.state.logs, self.tz)

    def date_range(self) -> DateRange | None:
        return date_range(self.state.logs, self.tz)
