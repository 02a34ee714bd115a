"""Saved route history service."""

from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from greenroute.models.route import SavedRoute
from greenroute.repositories.route_repository import RouteRepository
from greenroute.schemas.route import Location, SavedRouteItem


def to_item(saved: SavedRoute) -> SavedRouteItem:
    return SavedRouteItem(
        id=saved.id,
        created_at=saved.created_at,
        start_location=Location(
            latitude=saved.start_lat, longitude=saved.start_lng, address=saved.start_address
        ),
        end_location=Location(
            latitude=saved.end_lat, longitude=saved.end_lng, address=saved.end_address
        ),
        transport_mode=saved.transport_mode,
        distance_m=saved.distance_m,
        duration_s=saved.duration_s,
        co2_emission_g=saved.co2_emission_g,
    )


class HistoryService:
    """Reads a user's saved routes."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RouteRepository(db)

    def get_user_routes(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0,
        mode: Optional[str] = None,
    ) -> Tuple[List[SavedRouteItem], int]:
        """Get a user's saved routes, newest first, with the total count."""
        routes, total = self.repo.get_user_routes(
            user_id=user_id, limit=limit, offset=offset, mode=mode
        )
        return [to_item(route) for route in routes], total
