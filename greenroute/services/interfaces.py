"""Collaborator contracts consumed by RouteService.

Production implementations live next to this module; tests pass fakes that
satisfy the same protocols.
"""

from typing import List, Optional, Protocol

from greenroute.schemas.charging import ChargingStation
from greenroute.schemas.route import Location, Route, RouteSegment, TransportMode
from greenroute.schemas.traffic import TrafficPattern


class DirectionsProvider(Protocol):
    async def get_route(
        self, origin: Location, destination: Location, mode: TransportMode
    ) -> Optional[RouteSegment]:
        """Route for one mode, or None when the provider has no route."""
        ...


class TrafficHistoryStore(Protocol):
    async def get_pattern(
        self, start: Location, end: Location, day_of_week: int, hour_of_day: int
    ) -> Optional[TrafficPattern]:
        """Averaged pattern for the key, or None when nothing was recorded."""
        ...

    async def record_observation(
        self,
        start: Location,
        end: Location,
        day_of_week: int,
        hour_of_day: int,
        duration_s: float,
    ) -> None:
        """Atomically add one observed duration to the key's running mean."""
        ...


class ChargingStationLocator(Protocol):
    async def find_nearby(
        self, latitude: float, longitude: float, radius_km: float
    ) -> List[ChargingStation]: ...


class RouteStore(Protocol):
    def save(self, route: Route) -> object:
        """Persist the route; raises on failure."""
        ...
