"""BoatInfo entity - the boat registry (static identity reference data)."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from fleetwatch.models.base import Base


class BoatInfo(Base):
    __tablename__ = "boats_info"

    boat_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    boat_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    registration_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    current_location: Mapped[Optional["BoatCurrentLocation"]] = relationship(
        "BoatCurrentLocation", back_populates="boat", uselist=False
    )
    logs: Mapped[list] = relationship("BoatLocationLog", back_populates="boat", cascade="all, delete-orphan")
