"""User endpoints: stored preferences and saved route history."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from greenroute.db.base import get_db
from greenroute.schemas.route import RoutePreferences, SavedRouteListResponse, TransportMode
from greenroute.schemas.user import StoredRoutePreferences
from greenroute.services.history_service import HistoryService
from greenroute.services.preference_service import PreferenceService

router = APIRouter()


@router.get("/{user_id}/preferences", response_model=StoredRoutePreferences)
async def get_user_preferences(user_id: str, db: Session = Depends(get_db)):
    """Get a user's stored route preferences (404 when none are stored)."""
    return PreferenceService(db).get_preferences(user_id)


@router.put("/{user_id}/preferences", response_model=StoredRoutePreferences)
async def update_user_preferences(
    user_id: str,
    preferences: RoutePreferences,
    db: Session = Depends(get_db),
):
    """Create or replace a user's stored route preferences."""
    return PreferenceService(db).update_preferences(user_id, preferences)


@router.get("/{user_id}/routes", response_model=SavedRouteListResponse)
async def get_user_routes(
    user_id: str,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    mode: Optional[TransportMode] = None,
    db: Session = Depends(get_db),
):
    """List a user's saved routes, newest first."""
    history_service = HistoryService(db)
    items, total = history_service.get_user_routes(
        user_id=user_id,
        limit=limit,
        offset=offset,
        mode=mode.value if mode else None,
    )
    return SavedRouteListResponse(items=items, total=total, limit=limit, offset=offset)
