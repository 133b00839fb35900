"""Pydantic value types read from the boat store.

All three are immutable once fetched. Naive timestamps from the store are
taken to be UTC so that calendar-day conversion is well defined.
"""
from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, field_validator


def _assume_utc(v: datetime) -> datetime:
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class BoatIdentity(BaseModel):
    boat_id: str
    boat_name: str = ""
    registration_number: str = ""

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("boat_name", "registration_number", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v if v is not None else ""


class BoatSummary(BaseModel):
    """Current known state of one boat, as of the latest poll."""
    id: int
    boat_id: str
    registration_number: str = ""
    last_updated: datetime
    latitude: float
    longitude: float
    is_distress: bool = False

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("registration_number", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v if v is not None else ""

    @field_validator("last_updated")
    @classmethod
    def last_updated_utc(cls, v: datetime) -> datetime:
        return _assume_utc(v)


class BoatTrackPoint(BaseModel):
    latitude: float
    longitude: float
    recorded_at: datetime

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("recorded_at")
    @classmethod
    def recorded_at_utc(cls, v: datetime) -> datetime:
        return _assume_utc(v)
