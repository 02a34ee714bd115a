"""Historical traffic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class TrafficPattern(BaseModel):
    """Averaged travel duration for a route's endpoints in one hour-of-week bucket."""

    start_lat: float
    start_lng: float
    end_lat: float
    end_lng: float
    day_of_week: int = Field(..., ge=0, le=6)  # 0 = Sunday
    hour_of_day: int = Field(..., ge=0, le=23)
    average_duration_s: float = Field(..., ge=0)
    sample_count: int = Field(..., ge=1)
    last_updated: datetime | None = None
