"""Pydantic view models for the dashboard and track pages.

Everything here is derived from the current snapshot / track state and is
rebuilt on every request; nothing is stored.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from fleetwatch.schemas.boat import BoatIdentity, BoatSummary, BoatTrackPoint
from fleetwatch.schemas.weather import WeatherSnapshot


class MapMarker(BaseModel):
    latitude: float
    longitude: float
    label: str = ""
    detail: Optional[str] = None
    status: Optional[str] = None


class MapCircle(BaseModel):
    latitude: float
    longitude: float
    radius_m: float
    color: str = "red"
    fill_color: str = "red"
    fill_opacity: float = 0.8
    weight: int = 30


class MapPolyline(BaseModel):
    positions: list[tuple[float, float]]
    color: str = "grey"
    weight: int = 3
    dash_array: Optional[str] = "8, 6"


class MapBounds(BaseModel):
    south: float
    west: float
    north: float
    east: float
    padding_px: int = 50


class MapView(BaseModel):
    center: tuple[float, float]
    zoom: int
    tile_url: str
    attribution: str
    markers: list[MapMarker] = Field(default_factory=list)
    circles: list[MapCircle] = Field(default_factory=list)
    polyline: Optional[MapPolyline] = None
    bounds: Optional[MapBounds] = None


class BoatTableRow(BaseModel):
    registration_number: str
    last_updated: datetime
    location: str
    status: str


class BoatTable(BaseModel):
    rows: list[BoatTableRow] = Field(default_factory=list)
    placeholder: Optional[str] = None


class SummaryCards(BaseModel):
    registered_boats: int
    now: datetime
    weather: Optional[WeatherSnapshot] = None


class DistressBanner(BaseModel):
    text: str


class DashboardView(BaseModel):
    cards: SummaryCards
    table: BoatTable
    map: MapView
    distressed: bool = False
    banner: Optional[DistressBanner] = None


class CurrentBoatsRead(BaseModel):
    boats: list[BoatSummary]
    distressed: bool
    loading: bool
    refreshed_at: Optional[datetime] = None


class DateRange(BaseModel):
    min: date
    max: date

    model_config = {"frozen": True}


class TrackView(BaseModel):
    boat: Optional[BoatIdentity] = None
    selected_date: str = ""
    points: list[BoatTrackPoint] = Field(default_factory=list)
    total_points: int = 0
    available_dates: list[str] = Field(default_factory=list)
    date_range: Optional[DateRange] = None
    map: MapView
