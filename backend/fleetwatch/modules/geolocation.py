"""Viewer geolocation providers for the weather card.

A provider answers one question, once: where is the viewer? It raises
``GeolocationUnavailable`` when the position is unknown, unsupported or
denied; callers skip the weather card in that case.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from fleetwatch.config import settings


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


class GeolocationUnavailable(Exception):
    """No viewer position (unsupported, denied or not configured)."""


class GeolocationProvider(ABC):

    @abstractmethod
    async def current_position(self) -> Coordinates:
        ...


class FixedGeolocation(GeolocationProvider):
    """A position known up front (e.g. passed by the browser as query params)."""

    def __init__(self, latitude: float, longitude: float):
        if not (-90 <= latitude <= 90) or not (-180 <= longitude <= 180):
            raise ValueError(f"Coordinates out of range: ({latitude}, {longitude})")
        self._coords = Coordinates(latitude, longitude)

    async def current_position(self) -> Coordinates:
        return self._coords


class ConfiguredGeolocation(GeolocationProvider):
    """Position from VIEWER_LATITUDE / VIEWER_LONGITUDE settings."""

    async def current_position(self) -> Coordinates:
        lat = settings.VIEWER_LATITUDE
        lon = settings.VIEWER_LONGITUDE
        if lat is None or lon is None:
            raise GeolocationUnavailable("VIEWER_LATITUDE/VIEWER_LONGITUDE not configured")
        return Coordinates(lat, lon)


class NoGeolocation(GeolocationProvider):
    """Geolocation unsupported or denied."""

    async def current_position(self) -> Coordinates:
        raise GeolocationUnavailable("Geolocation not supported")
