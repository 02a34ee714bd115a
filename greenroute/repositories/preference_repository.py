"""Route preference repository."""

from typing import Optional

from sqlalchemy.orm import Session

from greenroute.models.preference import RoutePreference
from greenroute.schemas.route import RoutePreferences


class PreferenceRepository:
    """Stored route preference data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: str) -> Optional[RoutePreference]:
        """Get a user's stored preferences."""
        return self.db.query(RoutePreference).filter(RoutePreference.user_id == user_id).first()

    def upsert(self, user_id: str, preferences: RoutePreferences) -> RoutePreference:
        """Create or replace a user's stored preferences."""
        record = self.get_by_user(user_id)
        if record is None:
            record = RoutePreference(user_id=user_id)
            self.db.add(record)

        record.preferred_modes = ",".join(mode.value for mode in preferences.preferred_modes)
        record.avoid_highways = preferences.avoid_highways
        record.max_walking_distance_m = preferences.max_walking_distance_m
        record.prioritize_emission = preferences.prioritize_emission
        record.max_transfers = preferences.max_transfers

        self.db.commit()
        self.db.refresh(record)
        return record
