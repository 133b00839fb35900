"""View projection - derive dashboard and track views from current state.

Pure functions only: every view is rebuilt from the poll state, distress
state, track state and weather it is given, and holds no state of its own.
Map presentation defaults (tiles, centres, overlay styles) come from
``config/map.yaml``.
"""
from __future__ import annotations

import copy
import logging
from datetime import datetime, tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml

from fleetwatch.config import settings
from fleetwatch.modules.poller import PollState
from fleetwatch.modules.track_filter import TrackState, available_dates, date_range
from fleetwatch.schemas.alerts import DistressOverlay
from fleetwatch.schemas.boat import BoatSummary
from fleetwatch.schemas.dashboard import (
    BoatTable,
    BoatTableRow,
    DashboardView,
    DistressBanner,
    MapBounds,
    MapCircle,
    MapMarker,
    MapPolyline,
    MapView,
    SummaryCards,
    TrackView,
)
from fleetwatch.schemas.weather import WeatherSnapshot

logger = logging.getLogger(__name__)

LOADING_PLACEHOLDER = "Loading..."
EMPTY_PLACEHOLDER = "No data found."
BANNER_TEXT = "Emergency Alert: A boat is in distress!"

_DEFAULT_MAP_CONFIG: dict[str, Any] = {
    "tiles": {
        "url": "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
        "attribution": "&copy; OpenStreetMap contributors",
    },
    "live_map": {"center": [14.085616, 120.627538], "zoom": 12},
    "track_map": {"center": [13.7563, 121.0583], "zoom": 12, "fit_padding_px": 50},
    "distress_circle": {"color": "red", "fill_color": "red", "fill_opacity": 0.8, "weight": 30},
    "track_polyline": {"color": "grey", "weight": 3, "dash_array": "8, 6"},
}


def _resolve_config_path(path_value: str) -> Path:
    path = Path(path_value)
    if path.is_absolute() or path.exists():
        return path
    # config/ is at repo root (one level above backend/)
    return Path(__file__).resolve().parents[3] / path_value


@lru_cache(maxsize=4)
def load_map_config(path_value: str | None = None) -> dict[str, Any]:
    """Map config merged over built-in defaults (missing file = defaults)."""
    merged = copy.deepcopy(_DEFAULT_MAP_CONFIG)
    path = _resolve_config_path(path_value or settings.MAP_CONFIG)
    if not path.exists():
        logger.warning("Map config not found at %s - using defaults", path)
        return merged
    with open(path) as f:
        loaded = yaml.safe_load(f) or {}
    for section, values in loaded.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def status_label(row: BoatSummary) -> str:
    return "EMERGENCY" if row.is_distress else "NORMAL"


def _location_text(latitude: float, longitude: float) -> str:
    return f"Lat: {latitude}, Lng: {longitude}"


def build_boat_table(poll_state: PollState) -> BoatTable:
    if poll_state.loading:
        return BoatTable(placeholder=LOADING_PLACEHOLDER)
    if not poll_state.snapshot:
        return BoatTable(placeholder=EMPTY_PLACEHOLDER)
    return BoatTable(rows=[
        BoatTableRow(
            registration_number=row.registration_number,
            last_updated=row.last_updated,
            location=_location_text(row.latitude, row.longitude),
            status=status_label(row),
        )
        for row in poll_state.snapshot
    ])


def build_live_map(
    snapshot: Sequence[BoatSummary],
    overlays: Sequence[DistressOverlay] = (),
    config: dict[str, Any] | None = None,
) -> MapView:
    cfg = config or load_map_config()
    circle_style = cfg["distress_circle"]
    return MapView(
        center=tuple(cfg["live_map"]["center"]),
        zoom=cfg["live_map"]["zoom"],
        tile_url=cfg["tiles"]["url"],
        attribution=cfg["tiles"]["attribution"],
        markers=[
            MapMarker(
                latitude=row.latitude,
                longitude=row.longitude,
                label=row.registration_number,
                detail=_location_text(row.latitude, row.longitude),
                status=status_label(row),
            )
            for row in snapshot
        ],
        circles=[
            MapCircle(
                latitude=o.latitude,
                longitude=o.longitude,
                radius_m=o.radius_m,
                color=circle_style["color"],
                fill_color=circle_style["fill_color"],
                fill_opacity=circle_style["fill_opacity"],
                weight=circle_style["weight"],
            )
            for o in overlays
        ],
    )


def build_summary_cards(
    registered_boats: int,
    now: datetime,
    weather: WeatherSnapshot | None = None,
) -> SummaryCards:
    return SummaryCards(registered_boats=registered_boats, now=now, weather=weather)


def build_distress_banner(distressed: bool) -> DistressBanner | None:
    return DistressBanner(text=BANNER_TEXT) if distressed else None


def build_dashboard_view(
    poll_state: PollState,
    overlays: Sequence[DistressOverlay],
    registered_boats: int,
    now: datetime,
    weather: WeatherSnapshot | None = None,
    config: dict[str, Any] | None = None,
) -> DashboardView:
    distressed = any(row.is_distress for row in poll_state.snapshot)
    return DashboardView(
        cards=build_summary_cards(registered_boats, now, weather),
        table=build_boat_table(poll_state),
        map=build_live_map(poll_state.snapshot, overlays, config),
        distressed=distressed,
        banner=build_distress_banner(distressed),
    )


def build_track_view(
    state: TrackState,
    tz: tzinfo | None = None,
    config: dict[str, Any] | None = None,
) -> TrackView:
    cfg = config or load_map_config()
    track_cfg = cfg["track_map"]
    points = list(state.filtered)
    boat_name = state.boat.boat_name if state.boat else ""

    polyline = None
    if len(points) > 1:
        style = cfg["track_polyline"]
        polyline = MapPolyline(
            positions=[(p.latitude, p.longitude) for p in points],
            color=style["color"],
            weight=style["weight"],
            dash_array=style.get("dash_array"),
        )

    bounds = None
    if points:
        bounds = MapBounds(
            south=min(p.latitude for p in points),
            west=min(p.longitude for p in points),
            north=max(p.latitude for p in points),
            east=max(p.longitude for p in points),
            padding_px=track_cfg.get("fit_padding_px", 50),
        )

    return TrackView(
        boat=state.boat,
        selected_date=state.selected_date,
        points=points,
        total_points=len(state.logs),
        available_dates=available_dates(state.logs, tz),
        date_range=date_range(state.logs, tz),
        map=MapView(
            center=tuple(track_cfg["center"]),
            zoom=track_cfg["zoom"],
            tile_url=cfg["tiles"]["url"],
            attribution=cfg["tiles"]["attribution"],
            markers=[
                MapMarker(
                    latitude=p.latitude,
                    longitude=p.longitude,
                    label=boat_name,
                    detail=p.recorded_at.isoformat(),
                )
                for p in points
            ],
            polyline=polyline,
            bounds=bounds,
        ),
    )
