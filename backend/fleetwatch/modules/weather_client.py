"""Current weather at the viewer's position via the Open-Meteo forecast API.

One-shot enrichment, not resilient: a single GET, no retries, no refresh.
Any failure (network, HTTP status, malformed payload) is logged and the
weather is simply left unset.

Provides:
  - fetch_current_weather() - one request for a coordinate
  - load_viewer_weather()   - resolve the viewer position, then fetch
"""
from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from fleetwatch.config import settings
from fleetwatch.modules.geolocation import GeolocationProvider, GeolocationUnavailable
from fleetwatch.schemas.weather import WeatherSnapshot

logger = logging.getLogger(__name__)


def _forecast_url() -> str:
    return f"{settings.WEATHER_API_BASE_URL.rstrip('/')}/v1/forecast"


def parse_current_weather(data: Any) -> WeatherSnapshot | None:
    """Extract the ``current_weather`` block; ``None`` when absent."""
    if not isinstance(data, dict):
        return None
    current = data.get("current_weather")
    if not isinstance(current, dict):
        return None
    return WeatherSnapshot(
        temperature=current["temperature"],
        windspeed=current["windspeed"],
        weathercode=current["weathercode"],
        time=current["time"],
    )


async def fetch_current_weather(
    latitude: float,
    longitude: float,
    client: httpx.AsyncClient | None = None,
) -> WeatherSnapshot | None:
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "current_weather": "true",
    }
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.WEATHER_TIMEOUT) as own_client:
                resp = await own_client.get(_forecast_url(), params=params)
        else:
            resp = await client.get(_forecast_url(), params=params)
        resp.raise_for_status()
        weather = parse_current_weather(resp.json())
    except httpx.HTTPError as exc:
        logger.error("Error fetching weather for %s/%s: %s", latitude, longitude, exc)
        return None
    except (ValueError, KeyError, TypeError, ValidationError) as exc:
        logger.error("Malformed weather payload for %s/%s: %s", latitude, longitude, exc)
        return None

    if weather is None:
        logger.warning("Weather response for %s/%s had no current_weather block", latitude, longitude)
    return weather


async def load_viewer_weather(
    geolocation: GeolocationProvider,
    client: httpx.AsyncClient | None = None,
) -> WeatherSnapshot | None:
    """Weather at the viewer's position, or ``None`` if unknown/unavailable."""
    try:
        coords = await geolocation.current_position()
    except GeolocationUnavailable as exc:
        logger.info("Skipping weather - geolocation unavailable: %s", exc)
        return None
    return await fetch_current_weather(coords.latitude, coords.longitude, client=client)
