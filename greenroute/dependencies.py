"""FastAPI dependencies."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from greenroute.db.base import get_db
from greenroute.repositories.route_repository import RouteRepository
from greenroute.services.route_service import RouteService


def get_route_service(request: Request, db: Session = Depends(get_db)) -> RouteService:
    """RouteService wired to the process-wide clients created at startup.

    Only the route store is request scoped, since it holds the DB session.
    """
    state = request.app.state
    return RouteService(
        directions=state.directions_service,
        traffic_store=state.traffic_store,
        charging_locator=state.charging_service,
        route_store=RouteRepository(db),
    )
