"""Google Directions client with optional Redis caching."""

import asyncio
import hashlib
import json
import logging
from typing import Any, Dict, Optional

import httpx
import redis.asyncio as redis

from greenroute.config import get_settings
from greenroute.core.exceptions import ExternalServiceError
from greenroute.schemas.route import Location, RouteSegment, TransportMode
from greenroute.utils.emissions import estimate_emission

logger = logging.getLogger(__name__)
settings = get_settings()

# Our transport modes -> Google Directions travel modes
GOOGLE_TRAVEL_MODES: Dict[TransportMode, str] = {
    TransportMode.CAR: "driving",
    TransportMode.BICYCLE: "bicycling",
    TransportMode.WALKING: "walking",
    TransportMode.PUBLIC_TRANSIT: "transit",
}

# Google reports these inside a 200 response
NO_ROUTE_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}
RETRYABLE_STATUSES = {"OVER_QUERY_LIMIT", "UNKNOWN_ERROR"}


def format_location(location: Location) -> str:
    return f"{location.latitude:.6f},{location.longitude:.6f}"


class DirectionsService:
    """Per-mode route lookup against the Google Directions API."""

    def __init__(self, cache: Optional[redis.Redis] = None):
        self.base_url = settings.GOOGLE_MAPS_API_URL
        self.api_key = settings.GOOGLE_MAPS_API_KEY
        self.timeout = settings.DIRECTIONS_TIMEOUT_S
        self.max_retries = 2
        self.retry_delays = [1, 2]
        self.cache_ttl = settings.DIRECTIONS_CACHE_TTL_S
        self.cache = cache

    def _generate_cache_key(self, origin: Location, destination: Location, mode: str) -> str:
        """Generate cache key for a directions request."""
        data = f"{mode}:{format_location(origin)}:{format_location(destination)}"
        return f"directions:{hashlib.md5(data.encode()).hexdigest()}"

    async def _cache_get(self, key: str) -> Optional[Dict[str, Any]]:
        if self.cache is None:
            return None
        try:
            cached = await self.cache.get(key)
            if cached:
                logger.debug(f"Cache HIT for {key}")
                return json.loads(cached)
        except Exception as e:
            logger.warning(f"Redis get error: {str(e)}")
        return None

    async def _cache_set(self, key: str, leg: Dict[str, Any]) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.setex(key, self.cache_ttl, json.dumps(leg))
        except Exception as e:
            logger.warning(f"Redis set error: {str(e)}")

    async def fetch_leg(
        self, origin: Location, destination: Location, travel_mode: str
    ) -> Optional[Dict[str, Any]]:
        """Fetch the first leg of the first route Google returns.

        Args:
            origin: Start point
            destination: End point
            travel_mode: driving, bicycling, walking or transit

        Returns:
            Dict with distance_m and duration_s, or None if Google has no route

        Raises:
            ExternalServiceError: API unavailable, denied, or malformed response
        """
        cache_key = self._generate_cache_key(origin, destination, travel_mode)
        cached = await self._cache_get(cache_key)
        if cached is not None:
            return cached

        url = f"{self.base_url}/directions/json"
        params = {
            "origin": format_location(origin),
            "destination": format_location(destination),
            "mode": travel_mode,
            "key": self.api_key,
        }
        if travel_mode in ("driving", "transit"):
            params["departure_time"] = "now"

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params)
            except httpx.TimeoutException:
                logger.error(f"Directions timeout for {travel_mode} (attempt {attempt + 1})")
                if not last_attempt:
                    await asyncio.sleep(self.retry_delays[attempt])
                    continue
                raise ExternalServiceError("Directions service timeout")
            except httpx.HTTPError as e:
                logger.error(f"Directions transport error: {str(e)}")
                raise ExternalServiceError(f"Directions error: {str(e)}")

            if response.status_code >= 500 or response.status_code == 429:
                logger.warning(f"Directions HTTP {response.status_code} for {travel_mode}")
                if not last_attempt:
                    await asyncio.sleep(self.retry_delays[attempt])
                    continue
                raise ExternalServiceError("Directions service unavailable")

            if response.status_code != 200:
                logger.error(f"Directions HTTP {response.status_code}: {response.text}")
                raise ExternalServiceError("Invalid directions request")

            data = response.json()
            api_status = data.get("status", "UNKNOWN_ERROR")

            if api_status in NO_ROUTE_STATUSES:
                logger.info(f"No {travel_mode} route ({api_status})")
                return None

            if api_status in RETRYABLE_STATUSES:
                logger.warning(f"Directions status {api_status} for {travel_mode}")
                if not last_attempt:
                    await asyncio.sleep(self.retry_delays[attempt])
                    continue
                raise ExternalServiceError(f"Directions service returned {api_status}")

            if api_status != "OK":
                logger.error(f"Directions status {api_status}: {data.get('error_message', '')}")
                raise ExternalServiceError(f"Directions request rejected: {api_status}")

            leg = self.extract_leg(data)
            if leg is None:
                return None

            await self._cache_set(cache_key, leg)
            return leg

        raise ExternalServiceError("Failed to fetch directions after retries")

    def extract_leg(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Distance and duration of the first route's first leg."""
        routes = data.get("routes") or []
        if not routes:
            return None

        legs = routes[0].get("legs") or []
        if not legs:
            return None

        leg = legs[0]
        try:
            return {
                "distance_m": float(leg["distance"]["value"]),
                "duration_s": float(leg["duration"]["value"]),
            }
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalServiceError(f"Malformed directions leg: {str(e)}")

    async def get_route(
        self, origin: Location, destination: Location, mode: TransportMode
    ) -> Optional[RouteSegment]:
        """Route segment for one transport mode, with its CO2 estimate."""
        leg = await self.fetch_leg(origin, destination, GOOGLE_TRAVEL_MODES[mode])
        if leg is None:
            return None

        return RouteSegment(
            start_location=origin,
            end_location=destination,
            mode=mode,
            duration_s=leg["duration_s"],
            distance_m=leg["distance_m"],
            co2_emission_g=estimate_emission(mode, leg["distance_m"]),
        )
