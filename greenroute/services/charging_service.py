"""OpenChargeMap client for EV charging station lookup."""

import logging
from typing import Any, Dict, List

import httpx

from greenroute.config import get_settings
from greenroute.core.exceptions import ExternalServiceError
from greenroute.schemas.charging import ChargingStation, Connection

logger = logging.getLogger(__name__)
settings = get_settings()


class ChargingStationService:
    """Client for the OpenChargeMap POI API."""

    def __init__(self):
        self.base_url = settings.OPENCHARGE_API_URL
        self.api_key = settings.OPENCHARGE_API_KEY
        self.timeout = settings.CHARGING_TIMEOUT_S
        self.max_results = settings.OPENCHARGE_MAX_RESULTS

    async def find_nearby(
        self, latitude: float, longitude: float, radius_km: float
    ) -> List[ChargingStation]:
        """Find charging stations within ``radius_km`` of a point.

        Args:
            latitude: Search centre latitude
            longitude: Search centre longitude
            radius_km: Search radius in kilometres

        Returns:
            Normalized stations; records without an ID or position are dropped

        Raises:
            ExternalServiceError: API unavailable or returned an error
        """
        url = f"{self.base_url}/poi"
        params = {
            "output": "json",
            "latitude": latitude,
            "longitude": longitude,
            "distance": radius_km,
            "distanceunit": "km",
            "maxresults": self.max_results,
        }
        headers = {"X-API-Key": self.api_key}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"OpenChargeMap timeout near ({latitude}, {longitude})")
            raise ExternalServiceError("Charging station service timeout")
        except httpx.HTTPError as e:
            logger.error(f"OpenChargeMap transport error: {str(e)}")
            raise ExternalServiceError(f"Charging station error: {str(e)}")

        if response.status_code != 200:
            logger.error(f"OpenChargeMap error {response.status_code}: {response.text}")
            raise ExternalServiceError(
                f"Charging station request failed with status {response.status_code}"
            )

        records = response.json() or []
        stations = []
        for record in records:
            station = self.normalize_station(record)
            if station is not None:
                stations.append(station)

        logger.info(f"Found {len(stations)} charging stations near ({latitude}, {longitude})")
        return stations

    def normalize_station(self, record: Dict[str, Any]) -> ChargingStation | None:
        """Normalize a raw OpenChargeMap POI record.

        Args:
            record: Raw POI from the API

        Returns:
            ChargingStation, or None when the record has no usable ID or position
        """
        address_info = record.get("AddressInfo") or {}
        station_id = record.get("ID")
        latitude = address_info.get("Latitude")
        longitude = address_info.get("Longitude")

        if station_id is None or latitude is None or longitude is None:
            logger.debug(f"Skipping incomplete charging station record: {station_id}")
            return None

        try:
            station_id = int(station_id)
            latitude = float(latitude)
            longitude = float(longitude)
        except (TypeError, ValueError):
            logger.debug(f"Skipping charging station record with unusable ID: {station_id}")
            return None

        connections = []
        for connection in record.get("Connections") or []:
            connection_type = connection.get("ConnectionType") or {}
            connections.append(
                Connection(
                    type=connection_type.get("Title") or "Unknown",
                    power_kw=connection.get("PowerKW"),
                )
            )

        usage_type = record.get("UsageType") or {}

        return ChargingStation(
            id=station_id,
            name=address_info.get("Title") or "",
            address=address_info.get("AddressLine1") or "",
            latitude=latitude,
            longitude=longitude,
            connections=connections,
            usage_type=usage_type.get("Title"),
        )
