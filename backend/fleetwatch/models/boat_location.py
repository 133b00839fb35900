"""BoatCurrentLocation entity - latest known position and distress flag per boat."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Integer, Float, Boolean, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from fleetwatch.models.base import Base


class BoatCurrentLocation(Base):
    __tablename__ = "boat_current_location"
    __table_args__ = (
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_current_lat_bounds"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_current_lon_bounds"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    boat_id: Mapped[str] = mapped_column(String(64), ForeignKey("boats_info.boat_id"), nullable=False, index=True)
    last_updated: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    is_distress: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    boat: Mapped["BoatInfo"] = relationship("BoatInfo", back_populates="current_location")
