"""Unit tests for the Google Directions client."""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from fakes import BERLIN, MUNICH
from greenroute.core.exceptions import ExternalServiceError
from greenroute.schemas.route import TransportMode
from greenroute.services.directions_service import DirectionsService


def directions_payload(distance_m=584000, duration_s=19800, status="OK"):
    return {
        "status": status,
        "routes": [
            {
                "legs": [
                    {
                        "distance": {"text": "584 km", "value": distance_m},
                        "duration": {"text": "5 hours 30 mins", "value": duration_s},
                    }
                ]
            }
        ],
    }


def mock_response(status_code=200, payload=None):
    # httpx.Response.json is sync
    response = AsyncMock()
    response.status_code = status_code
    response.text = ""
    response.json = Mock(return_value=payload if payload is not None else {})
    return response


@pytest.fixture
def service():
    service = DirectionsService()
    service.retry_delays = [0, 0]
    return service


@pytest.mark.asyncio
async def test_get_route_builds_segment(service):
    """Test a successful response becomes a segment with its emission."""
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload=directions_payload())

        segment = await service.get_route(BERLIN, MUNICH, TransportMode.CAR)

    assert segment.mode == TransportMode.CAR
    assert segment.distance_m == 584000
    assert segment.duration_s == 19800
    assert segment.co2_emission_g == 70080.0
    assert segment.start_location == BERLIN
    assert segment.end_location == MUNICH


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "mode,travel_mode",
    [
        (TransportMode.CAR, "driving"),
        (TransportMode.BICYCLE, "bicycling"),
        (TransportMode.WALKING, "walking"),
        (TransportMode.PUBLIC_TRANSIT, "transit"),
    ],
)
async def test_mode_mapping(service, mode, travel_mode):
    """Test each transport mode maps to its Google travel mode."""
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload=directions_payload())

        await service.get_route(BERLIN, MUNICH, mode)

    params = mock_get.call_args.kwargs["params"]
    assert params["mode"] == travel_mode
    assert params["origin"] == "52.520000,13.405000"
    assert params["destination"] == "48.137000,11.575000"
    assert mock_get.call_args.args[0].endswith("/directions/json")


@pytest.mark.asyncio
async def test_departure_time_only_for_driving_and_transit(service):
    """Test live traffic is requested only where Google supports it."""
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload=directions_payload())

        await service.get_route(BERLIN, MUNICH, TransportMode.CAR)
        assert mock_get.call_args.kwargs["params"]["departure_time"] == "now"

        await service.get_route(BERLIN, MUNICH, TransportMode.WALKING)
        assert "departure_time" not in mock_get.call_args.kwargs["params"]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["ZERO_RESULTS", "NOT_FOUND"])
async def test_no_route_returns_none(service, status):
    """Test Google's no-route statuses mean no segment."""
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload={"status": status, "routes": []})

        segment = await service.get_route(BERLIN, MUNICH, TransportMode.PUBLIC_TRANSIT)

    assert segment is None


@pytest.mark.asyncio
async def test_ok_without_routes_returns_none(service):
    """Test an OK response with no legs means no segment."""
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload={"status": "OK", "routes": []})

        assert await service.get_route(BERLIN, MUNICH, TransportMode.CAR) is None


@pytest.mark.asyncio
async def test_request_denied_raises(service):
    """Test a rejected request is an external service error."""
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(
            payload={"status": "REQUEST_DENIED", "error_message": "API key invalid"}
        )

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.get_route(BERLIN, MUNICH, TransportMode.CAR)

    assert "REQUEST_DENIED" in exc_info.value.message
    assert exc_info.value.status_code == 502
    assert mock_get.call_count == 1


@pytest.mark.asyncio
async def test_server_error_retried_then_succeeds(service):
    """Test a 5xx response is retried."""
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.side_effect = [
            mock_response(status_code=503),
            mock_response(payload=directions_payload()),
        ]

        segment = await service.get_route(BERLIN, MUNICH, TransportMode.CAR)

    assert segment is not None
    assert mock_get.call_count == 2


@pytest.mark.asyncio
async def test_over_query_limit_exhausts_retries(service):
    """Test a persistent quota error raises after the last attempt."""
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload={"status": "OVER_QUERY_LIMIT"})

        with pytest.raises(ExternalServiceError):
            await service.get_route(BERLIN, MUNICH, TransportMode.CAR)

    assert mock_get.call_count == service.max_retries


@pytest.mark.asyncio
async def test_timeout_raises_after_retries(service):
    """Test repeated timeouts raise an external service error."""
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.get_route(BERLIN, MUNICH, TransportMode.CAR)

    assert exc_info.value.message == "Directions service timeout"
    assert mock_get.call_count == service.max_retries


@pytest.mark.asyncio
async def test_client_error_not_retried(service):
    """Test a 4xx response fails immediately."""
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(status_code=400)

        with pytest.raises(ExternalServiceError):
            await service.get_route(BERLIN, MUNICH, TransportMode.CAR)

    assert mock_get.call_count == 1


@pytest.mark.asyncio
async def test_cached_leg_skips_http_call():
    """Test a cache hit answers without calling Google."""
    cache = Mock()
    cache.get = AsyncMock(return_value='{"distance_m": 10000.0, "duration_s": 600.0}')
    cache.setex = AsyncMock()
    service = DirectionsService(cache=cache)

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        segment = await service.get_route(BERLIN, MUNICH, TransportMode.CAR)

    mock_get.assert_not_called()
    assert segment.distance_m == 10000.0
    assert segment.co2_emission_g == 1200.0


@pytest.mark.asyncio
async def test_cache_miss_stores_leg():
    """Test a fetched leg is written to the cache with the TTL."""
    cache = Mock()
    cache.get = AsyncMock(return_value=None)
    cache.setex = AsyncMock()
    service = DirectionsService(cache=cache)

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload=directions_payload(10000, 600))
        await service.get_route(BERLIN, MUNICH, TransportMode.CAR)

    key, ttl, _ = cache.setex.await_args.args
    assert key.startswith("directions:")
    assert ttl == service.cache_ttl


@pytest.mark.asyncio
async def test_cache_errors_are_ignored():
    """Test a broken cache never fails a directions lookup."""
    cache = Mock()
    cache.get = AsyncMock(side_effect=ConnectionError("redis down"))
    cache.setex = AsyncMock(side_effect=ConnectionError("redis down"))
    service = DirectionsService(cache=cache)

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = mock_response(payload=directions_payload(10000, 600))
        segment = await service.get_route(BERLIN, MUNICH, TransportMode.CAR)

    assert segment.distance_m == 10000


def test_cache_key_differs_by_mode_and_destination():
    """Test different parameters generate different cache keys."""
    service = DirectionsService()

    key1 = service._generate_cache_key(BERLIN, MUNICH, "driving")
    key2 = service._generate_cache_key(BERLIN, MUNICH, "bicycling")
    key3 = service._generate_cache_key(MUNICH, BERLIN, "driving")

    assert len({key1, key2, key3}) == 3
    assert key1 == service._generate_cache_key(BERLIN, MUNICH, "driving")
