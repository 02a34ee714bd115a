"""Rate limiting configuration."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from greenroute.config import get_settings

settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_route_calculation() -> str:
    """Rate limit for route calculation (fans out to several paid APIs)."""
    return f"{settings.RATE_LIMIT_PER_MINUTE}/minute"
