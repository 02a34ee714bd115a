"""Route domain types and request/response schemas."""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from greenroute.schemas.charging import ChargingStation


class TransportMode(str, Enum):
    """Supported transport modes."""

    CAR = "car"
    BICYCLE = "bicycle"
    WALKING = "walking"
    PUBLIC_TRANSIT = "public_transit"


class Location(BaseModel):
    """Geographic point.

    Bounds are checked by ``greenroute.utils.geo`` so that bad coordinates
    surface as a domain ``ValidationError`` rather than a schema error.
    """

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    address: Optional[str] = None


class RouteSegment(BaseModel):
    """One transport mode's route between the request's origin and destination."""

    model_config = ConfigDict(frozen=True)

    start_location: Location
    end_location: Location
    mode: TransportMode
    duration_s: float = Field(..., ge=0)
    distance_m: float = Field(..., ge=0)
    co2_emission_g: float = Field(..., ge=0)


class Route(BaseModel):
    """Composite route. Totals are always derived from the segments."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    start_location: Location
    end_location: Location
    segments: List[RouteSegment] = Field(..., min_length=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_distance_m(self) -> float:
        return sum((segment.distance_m for segment in self.segments), 0.0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_duration_s(self) -> float:
        return sum((segment.duration_s for segment in self.segments), 0.0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_emission_g(self) -> float:
        return sum((segment.co2_emission_g for segment in self.segments), 0.0)

    @property
    def primary_mode(self) -> TransportMode:
        """Mode of the first segment, i.e. the first mode that produced a route."""
        return self.segments[0].mode


class RoutePreferences(BaseModel):
    """Route calculation preferences.

    Only ``preferred_modes`` influences calculation. The remaining fields are
    accepted and stored but not yet applied.
    """

    preferred_modes: List[TransportMode] = Field(default_factory=lambda: [TransportMode.CAR])
    avoid_highways: bool = False
    max_walking_distance_m: float = Field(default=2000.0, ge=0)
    prioritize_emission: bool = False
    max_transfers: int = Field(default=2, ge=0)

    @field_validator("preferred_modes")
    @classmethod
    def dedupe_modes(cls, v: List[TransportMode]) -> List[TransportMode]:
        """Drop repeated modes, keeping the first occurrence's priority."""
        return list(dict.fromkeys(v))


class RouteWithCharging(BaseModel):
    """Route plus EV charging stations near its endpoints (unique by station id)."""

    route: Route
    charging_stations: List[ChargingStation] = []


class RouteCalculationRequest(BaseModel):
    """Request body for route calculation."""

    start_location: Location
    end_location: Location
    user_id: str = Field(..., min_length=1, max_length=64)
    preferences: Optional[RoutePreferences] = None


class SavedRouteItem(BaseModel):
    """Single entry of a user's saved route history."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    start_location: Location
    end_location: Location
    transport_mode: str
    distance_m: float
    duration_s: float
    co2_emission_g: float


class SavedRouteListResponse(BaseModel):
    """Paginated saved route list."""

    items: List[SavedRouteItem]
    total: int
    limit: int
    offset: int
