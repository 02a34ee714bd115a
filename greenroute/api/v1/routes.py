"""Route planning API endpoints."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from greenroute.core.rate_limit import limiter, rate_limit_route_calculation
from greenroute.db.base import get_db
from greenroute.dependencies import get_route_service
from greenroute.schemas.route import RouteCalculationRequest, RouteWithCharging
from greenroute.services.preference_service import PreferenceService
from greenroute.services.route_service import RouteService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/calculate",
    response_model=RouteWithCharging,
    summary="Calculate a multi-modal route",
    description="""
    Calculate a route between two points for each preferred transport mode.

    Each mode is routed independently and the successful ones are combined into
    one route with per-segment and total distance, duration and CO2 emission.
    Durations are replaced by the historical average for the current hour of the
    week when one is known. The route is saved to the user's history, and EV
    charging stations within 2 km of the start and end are attached.

    When `preferences` is omitted, the user's stored preferences are used, then
    the defaults (car only).

    **Transport Modes:** `car`, `bicycle`, `walking`, `public_transit`
    """,
    responses={
        200: {"description": "Route calculated"},
        404: {"description": "No preferred mode produced a route"},
        422: {"description": "Coordinates out of range or malformed request"},
        503: {"description": "Route could not be saved or traffic history unavailable"},
    },
)
@limiter.limit(rate_limit_route_calculation)
async def calculate_route(
    request: Request,
    body: RouteCalculationRequest,
    db: Session = Depends(get_db),
    route_service: RouteService = Depends(get_route_service),
):
    """Calculate, save and enrich a route.

    Domain errors propagate to the application's GreenRouteException handler.
    """
    preferences = PreferenceService(db).resolve(body.user_id, body.preferences)

    return await route_service.calculate_route(
        start=body.start_location,
        end=body.end_location,
        prefs=preferences,
        user_id=body.user_id,
    )


@router.get("/{route_id}")
async def get_route(route_id: str):
    """Get a previously calculated route by ID.

    Note: Route retrieval not yet implemented.
    """
    return JSONResponse(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        content={"error": "Route retrieval not yet implemented", "route_id": route_id},
    )
