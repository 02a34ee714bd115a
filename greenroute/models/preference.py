"""Stored route preference model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from greenroute.db.base import Base


class RoutePreference(Base):
    """Per-user default route preferences."""

    __tablename__ = "route_preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    preferred_modes: Mapped[str] = mapped_column(String, nullable=False)  # comma-separated
    avoid_highways: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    max_walking_distance_m: Mapped[float] = mapped_column(Float, default=2000.0, nullable=False)
    prioritize_emission: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    max_transfers: Mapped[int] = mapped_column(Integer, default=2, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    @property
    def mode_list(self) -> list[str]:
        return [mode for mode in self.preferred_modes.split(",") if mode]

    def __repr__(self) -> str:
        return f"<RoutePreference(user_id={self.user_id}, modes={self.preferred_modes})>"
