"""Route aggregation service.

Fans a route request out across the preferred transport modes, merges the
per-mode results into one route, adjusts durations from historical traffic,
persists the route, feeds the observation back into the traffic history and
looks up EV charging stations around the route's endpoints.

Failure policy per collaborator:
    traffic lookup      must succeed (a miss is fine, an outage is not)
    directions          per-mode best effort, at least one mode must succeed
    route save          must succeed
    traffic update      best effort
    charging search     best effort, per waypoint
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Iterable, List, NamedTuple, Optional, Sequence

from greenroute.config import get_settings
from greenroute.core.exceptions import NoRouteFoundError, UpstreamError
from greenroute.core.logging_config import log_fields
from greenroute.schemas.charging import ChargingStation
from greenroute.schemas.route import (
    Location,
    Route,
    RoutePreferences,
    RouteSegment,
    RouteWithCharging,
    TransportMode,
)
from greenroute.schemas.traffic import TrafficPattern
from greenroute.services.interfaces import (
    ChargingStationLocator,
    DirectionsProvider,
    RouteStore,
    TrafficHistoryStore,
)
from greenroute.utils.geo import validate_locations

logger = logging.getLogger(__name__)


class ModeOutcome(NamedTuple):
    """Result of one directions attempt: a segment, or the reason it was skipped."""

    mode: TransportMode
    segment: Optional[RouteSegment] = None
    skip_reason: Optional[str] = None


def day_and_hour(moment: datetime) -> tuple[int, int]:
    """Traffic bucket for a moment: (day of week with 0 = Sunday, hour of day)."""
    return moment.isoweekday() % 7, moment.hour


def merge_segments(
    outcomes: Sequence[ModeOutcome], pattern: Optional[TrafficPattern]
) -> List[RouteSegment]:
    """Collect successful segments in preference order.

    When a traffic pattern is known its average duration replaces the
    provider's duration; distance and emission are kept as reported.
    """
    segments = []
    for outcome in outcomes:
        if outcome.segment is None:
            continue
        segment = outcome.segment
        if pattern is not None:
            segment = segment.model_copy(update={"duration_s": pattern.average_duration_s})
        segments.append(segment)
    return segments


def merge_unique_stations(
    station_lists: Iterable[Iterable[ChargingStation]],
) -> List[ChargingStation]:
    """Merge per-waypoint results, keeping the first station seen for each id."""
    seen = set()
    merged = []
    for stations in station_lists:
        for station in stations:
            if station.id in seen:
                continue
            seen.add(station.id)
            merged.append(station)
    return merged


class RouteService:
    """Builds multi-modal routes with emissions and nearby charging stations."""

    def __init__(
        self,
        directions: DirectionsProvider,
        traffic_store: TrafficHistoryStore,
        charging_locator: ChargingStationLocator,
        route_store: RouteStore,
        clock: Callable[[], datetime] = datetime.now,
        corridor_km: Optional[float] = None,
    ):
        settings = get_settings()
        self.directions = directions
        self.traffic_store = traffic_store
        self.charging_locator = charging_locator
        self.route_store = route_store
        self.clock = clock
        self.corridor_km = corridor_km if corridor_km is not None else settings.CHARGING_CORRIDOR_KM
        self.directions_budget_s = settings.DIRECTIONS_BUDGET_S
        self.charging_timeout_s = settings.CHARGING_TIMEOUT_S
        self.traffic_lookup_timeout_s = settings.TRAFFIC_LOOKUP_TIMEOUT_S
        self.traffic_update_timeout_s = settings.TRAFFIC_UPDATE_TIMEOUT_S

    async def calculate_route(
        self,
        start: Location,
        end: Location,
        prefs: RoutePreferences,
        user_id: str,
    ) -> RouteWithCharging:
        """Calculate a route for every preferred mode and enrich it.

        Args:
            start: Origin
            end: Destination
            prefs: Preferences; ``preferred_modes`` order is evaluation priority
            user_id: Owner of the saved route

        Returns:
            The saved route and the charging stations near its endpoints

        Raises:
            ValidationError: Coordinates out of range (raised before any I/O)
            UpstreamError: Traffic history unreachable or route could not be saved
            NoRouteFoundError: No preferred mode produced a route
        """
        validate_locations(start=start, end=end)

        day_of_week, hour_of_day = day_and_hour(self.clock())
        pattern = await self._lookup_traffic(start, end, day_of_week, hour_of_day)

        outcomes = await asyncio.gather(
            *(self._attempt_mode(start, end, mode) for mode in prefs.preferred_modes)
        )
        segments = merge_segments(outcomes, pattern)

        if not segments:
            skipped = {outcome.mode.value: outcome.skip_reason for outcome in outcomes}
            logger.warning("No route for any preferred mode", extra=log_fields(skipped=skipped))
            raise NoRouteFoundError()

        route = Route(user_id=user_id, start_location=start, end_location=end, segments=segments)

        self._save_route(route)
        await self._record_traffic(start, end, day_of_week, hour_of_day, segments[0].duration_s)
        stations = await self.find_stations_along_route([start, end])

        logger.info(
            "Route calculated",
            extra=log_fields(
                route_id=route.id,
                modes=[segment.mode.value for segment in segments],
                traffic_adjusted=pattern is not None,
                charging_stations=len(stations),
            ),
        )
        return RouteWithCharging(route=route, charging_stations=stations)

    async def _lookup_traffic(
        self, start: Location, end: Location, day_of_week: int, hour_of_day: int
    ) -> Optional[TrafficPattern]:
        """Historical pattern for the bucket; None on a miss, UpstreamError on outage."""
        try:
            return await asyncio.wait_for(
                self.traffic_store.get_pattern(start, end, day_of_week, hour_of_day),
                timeout=self.traffic_lookup_timeout_s,
            )
        except UpstreamError:
            raise
        except asyncio.TimeoutError as e:
            raise UpstreamError("Traffic history lookup timed out") from e
        except Exception as e:
            raise UpstreamError(f"Traffic history lookup failed: {str(e)}") from e

    async def _attempt_mode(
        self, start: Location, end: Location, mode: TransportMode
    ) -> ModeOutcome:
        try:
            segment = await asyncio.wait_for(
                self.directions.get_route(start, end, mode),
                timeout=self.directions_budget_s,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Directions for {mode.value} timed out, skipping mode")
            return ModeOutcome(mode, skip_reason="timeout")
        except Exception as e:
            logger.warning(f"Directions for {mode.value} failed, skipping mode: {str(e)}")
            return ModeOutcome(mode, skip_reason=str(e) or type(e).__name__)

        if segment is None:
            return ModeOutcome(mode, skip_reason="no route")
        return ModeOutcome(mode, segment=segment)

    def _save_route(self, route: Route) -> None:
        """Must succeed: a computed route that isn't saved fails the request."""
        try:
            self.route_store.save(route)
        except Exception as e:
            logger.error(f"Failed to save route {route.id}: {str(e)}", exc_info=True)
            raise UpstreamError("Failed to save route") from e

    async def _record_traffic(
        self,
        start: Location,
        end: Location,
        day_of_week: int,
        hour_of_day: int,
        duration_s: float,
    ) -> None:
        """Best effort: failures are logged and never reach the caller."""
        try:
            await asyncio.wait_for(
                self.traffic_store.record_observation(
                    start, end, day_of_week, hour_of_day, duration_s
                ),
                timeout=self.traffic_update_timeout_s,
            )
        except Exception as e:
            logger.warning(f"Traffic pattern update skipped: {str(e) or type(e).__name__}")

    async def find_stations_along_route(
        self, waypoints: Sequence[Location], radius_km: Optional[float] = None
    ) -> List[ChargingStation]:
        """Charging stations within the corridor radius of each waypoint, unique by id.

        Best effort: a failing waypoint is skipped, and a failing search
        returns an empty list.
        """
        radius = radius_km if radius_km is not None else self.corridor_km
        try:
            results = await asyncio.gather(
                *(self._search_waypoint(waypoint, radius) for waypoint in waypoints)
            )
            return merge_unique_stations(results)
        except Exception as e:
            logger.warning(f"Charging station search failed: {str(e)}")
            return []

    async def _search_waypoint(self, waypoint: Location, radius_km: float) -> List[ChargingStation]:
        try:
            return await asyncio.wait_for(
                self.charging_locator.find_nearby(waypoint.latitude, waypoint.longitude, radius_km),
                timeout=self.charging_timeout_s,
            )
        except Exception as e:
            logger.warning(
                f"Charging lookup near ({waypoint.latitude}, {waypoint.longitude}) skipped: "
                f"{str(e) or type(e).__name__}"
            )
            return []
