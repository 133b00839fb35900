"""Pydantic schema for the Open-Meteo ``current_weather`` block."""
from __future__ import annotations

from pydantic import BaseModel


class WeatherSnapshot(BaseModel):
    temperature: float  # °C
    windspeed: float  # km/h
    weathercode: int  # WMO weather interpretation code
    time: str  # observation time as returned by the API (ISO 8601, no offset)

    model_config = {"frozen": True}
