"""Database models."""

from greenroute.models.preference import RoutePreference
from greenroute.models.route import SavedRoute

__all__ = [
    "SavedRoute",
    "RoutePreference",
]
