"""Saved route repository."""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import and_, desc, or_
from sqlalchemy.orm import Session

from greenroute.models.route import SavedRoute
from greenroute.schemas.route import Route


class RouteRepository:
    """Saved route data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def save(self, route: Route) -> SavedRoute:
        """Persist a calculated route.

        The stored transport mode is the route's primary mode (first segment).
        Rolls back and re-raises on database errors.
        """
        saved = SavedRoute(
            id=route.id,
            user_id=route.user_id,
            created_at=route.created_at,
            start_lat=route.start_location.latitude,
            start_lng=route.start_location.longitude,
            end_lat=route.end_location.latitude,
            end_lng=route.end_location.longitude,
            start_address=route.start_location.address,
            end_address=route.end_location.address,
            distance_m=route.total_distance_m,
            duration_s=route.total_duration_s,
            co2_emission_g=route.total_emission_g,
            transport_mode=route.primary_mode.value,
            segments=[segment.model_dump(mode="json") for segment in route.segments],
        )
        try:
            self.db.add(saved)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(saved)
        return saved

    def get_user_routes(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0,
        mode: Optional[str] = None,
    ) -> Tuple[List[SavedRoute], int]:
        """Get a user's saved routes, newest first.

        Returns:
            Tuple of (routes, total_count)
        """
        query = self.db.query(SavedRoute).filter(
            and_(
                SavedRoute.user_id == user_id,
                SavedRoute.deleted_at.is_(None),
            )
        )

        if mode:
            query = query.filter(SavedRoute.transport_mode == mode)

        total = query.count()
        routes = query.order_by(desc(SavedRoute.created_at)).limit(limit).offset(offset).all()

        return routes, total

    def hard_delete_old_records(self, days: int = 365) -> int:
        """Hard delete routes created (or soft-deleted) more than ``days`` ago.

        Returns:
            Number of records deleted
        """
        cutoff_date = datetime.utcnow() - timedelta(days=days)
        count = (
            self.db.query(SavedRoute)
            .filter(
                or_(
                    SavedRoute.deleted_at < cutoff_date,
                    and_(
                        SavedRoute.deleted_at.is_(None),
                        SavedRoute.created_at < cutoff_date,
                    ),
                )
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count
