"""Stored route preference service."""

from sqlalchemy.orm import Session

from greenroute.core.exceptions import NotFoundError
from greenroute.models.preference import RoutePreference
from greenroute.repositories.preference_repository import PreferenceRepository
from greenroute.schemas.route import RoutePreferences
from greenroute.schemas.user import StoredRoutePreferences


def to_schema(record: RoutePreference) -> StoredRoutePreferences:
    return StoredRoutePreferences(
        user_id=record.user_id,
        preferred_modes=record.mode_list,
        avoid_highways=record.avoid_highways,
        max_walking_distance_m=record.max_walking_distance_m,
        prioritize_emission=record.prioritize_emission,
        max_transfers=record.max_transfers,
        updated_at=record.updated_at,
    )


class PreferenceService:
    """Per-user default route preferences."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PreferenceRepository(db)

    def get_preferences(self, user_id: str) -> StoredRoutePreferences:
        """Get a user's stored preferences.

        Raises:
            NotFoundError: If the user has none stored
        """
        record = self.repo.get_by_user(user_id)
        if not record:
            raise NotFoundError("No stored preferences for user")
        return to_schema(record)

    def update_preferences(
        self, user_id: str, preferences: RoutePreferences
    ) -> StoredRoutePreferences:
        """Create or replace a user's stored preferences."""
        return to_schema(self.repo.upsert(user_id, preferences))

    def resolve(self, user_id: str, requested: RoutePreferences | None) -> RoutePreferences:
        """Preferences to calculate with: request, then stored, then defaults."""
        if requested is not None:
            return requested

        record = self.repo.get_by_user(user_id)
        if record is None:
            return RoutePreferences()

        stored = to_schema(record)
        return RoutePreferences(**stored.model_dump(exclude={"user_id", "updated_at"}))
