"""User preference schemas."""

from datetime import datetime

from greenroute.schemas.route import RoutePreferences


class StoredRoutePreferences(RoutePreferences):
    """Route preferences as stored for a user."""

    user_id: str
    updated_at: datetime | None = None
