"""Redis-backed historical traffic store.

Each (start, end, day-of-week, hour-of-day) bucket is a Redis hash holding the
accumulated observed duration and the number of observations. The average is
computed on read, and writes are a single MULTI/EXEC pipeline of HINCRBYFLOAT
and HINCRBY, so concurrent writers to the same bucket never lose samples.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from greenroute.config import get_settings
from greenroute.core.exceptions import UpstreamError
from greenroute.schemas.route import Location
from greenroute.schemas.traffic import TrafficPattern

logger = logging.getLogger(__name__)
settings = get_settings()


def create_redis_client(url: str | None = None) -> redis.Redis:
    """Create an asyncio Redis client. Connections are opened lazily."""
    return redis.from_url(url or settings.REDIS_URL, encoding="utf-8", decode_responses=True)


def traffic_key(start: Location, end: Location, day_of_week: int, hour_of_day: int) -> str:
    return (
        f"traffic:{start.latitude:.6f}:{start.longitude:.6f}:"
        f"{end.latitude:.6f}:{end.longitude:.6f}:{day_of_week}:{hour_of_day}"
    )


class TrafficHistoryStore:
    """Running-mean travel durations keyed by endpoints and hour of week."""

    def __init__(self, client: redis.Redis):
        self.redis = client
        self.ttl_seconds = settings.TRAFFIC_PATTERN_TTL_DAYS * 86400

    async def get_pattern(
        self, start: Location, end: Location, day_of_week: int, hour_of_day: int
    ) -> Optional[TrafficPattern]:
        """Get the averaged pattern for a bucket.

        Returns:
            TrafficPattern, or None when no observation was recorded

        Raises:
            UpstreamError: Redis unreachable or errored
        """
        key = traffic_key(start, end, day_of_week, hour_of_day)
        try:
            data = await self.redis.hgetall(key)
        except RedisError as e:
            logger.error(f"Traffic pattern lookup failed for {key}: {str(e)}")
            raise UpstreamError("Traffic history store unavailable")

        if not data:
            return None

        sample_count = int(data.get("sample_count", 0))
        if sample_count <= 0:
            return None

        last_updated = data.get("last_updated")
        return TrafficPattern(
            start_lat=start.latitude,
            start_lng=start.longitude,
            end_lat=end.latitude,
            end_lng=end.longitude,
            day_of_week=day_of_week,
            hour_of_day=hour_of_day,
            average_duration_s=float(data.get("total_duration_s", 0.0)) / sample_count,
            sample_count=sample_count,
            last_updated=datetime.fromisoformat(last_updated) if last_updated else None,
        )

    async def record_observation(
        self,
        start: Location,
        end: Location,
        day_of_week: int,
        hour_of_day: int,
        duration_s: float,
    ) -> None:
        """Add one observed duration to a bucket (atomic upsert).

        Raises:
            UpstreamError: Redis unreachable or errored
        """
        key = traffic_key(start, end, day_of_week, hour_of_day)
        pipe = self.redis.pipeline(transaction=True)
        pipe.hincrbyfloat(key, "total_duration_s", float(duration_s))
        pipe.hincrby(key, "sample_count", 1)
        pipe.hset(key, "last_updated", datetime.now(timezone.utc).isoformat())
        pipe.expire(key, self.ttl_seconds)

        try:
            await pipe.execute()
        except RedisError as e:
            logger.error(f"Traffic pattern update failed for {key}: {str(e)}")
            raise UpstreamError("Traffic history store unavailable")

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        await self.redis.aclose()
