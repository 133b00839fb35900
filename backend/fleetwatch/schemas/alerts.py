"""Pydantic schemas for distress alerts and their map overlays."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class DistressOverlay(BaseModel):
    """Highlight radius around one distressed boat."""
    boat_id: str
    registration_number: str = ""
    latitude: float
    longitude: float
    radius_m: float

    model_config = {"frozen": True}


class DistressNotification(BaseModel):
    boat_id: str
    registration_number: str = ""
    latitude: float
    longitude: float
    message: str
    issued_at: datetime

    model_config = {"frozen": True}


class AlertBoardRead(BaseModel):
    alarm_active: bool = False
    banner_visible: bool = False
    overlays: list[DistressOverlay] = Field(default_factory=list)
    notifications: list[DistressNotification] = Field(default_factory=list)
    last_notification: Optional[DistressNotification] = None
