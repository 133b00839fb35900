"""BoatLocationLog entity - historical position samples (track points)."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Integer, Float, String, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from fleetwatch.models.base import Base


class BoatLocationLog(Base):
    __tablename__ = "boat_location_logs"
    __table_args__ = (
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_log_lat_bounds"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_log_lon_bounds"),
        Index("ix_boat_log_boat_recorded", "boat_id", "recorded_at"),
    )

    log_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    boat_id: Mapped[str] = mapped_column(String(64), ForeignKey("boats_info.boat_id"), nullable=False, index=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    boat: Mapped["BoatInfo"] = relationship("BoatInfo", back_populates="logs")
