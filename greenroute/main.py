"""GreenRoute API - FastAPI application entry point.

Multi-modal route planning with CO2 estimates, historical traffic adjustment
and EV charging stations along the way.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.orm import Session

from greenroute.api.v1 import routes, users
from greenroute.config import get_settings
from greenroute.core.exceptions import GreenRouteException
from greenroute.core.logging_config import get_logger, setup_logging
from greenroute.core.middleware import MetricsMiddleware, MetricsRegistry, RequestLoggingMiddleware
from greenroute.core.rate_limit import limiter
from greenroute.db.base import get_db
from greenroute.services.charging_service import ChargingStationService
from greenroute.services.directions_service import DirectionsService
from greenroute.services.traffic_service import TrafficHistoryStore, create_redis_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Create the process-wide external clients once and close them on shutdown."""
    settings = get_settings()
    setup_logging()
    logger = get_logger(__name__)
    logger.info(f"Starting GreenRoute API in {settings.APP_ENV} mode")

    redis_client = create_redis_client()
    app.state.traffic_store = TrafficHistoryStore(redis_client)
    app.state.directions_service = DirectionsService(cache=redis_client)
    app.state.charging_service = ChargingStationService()

    yield

    logger.info("Shutting down GreenRoute API")
    await app.state.traffic_store.close()


app = FastAPI(
    title="GreenRoute API",
    description="""GreenRoute plans trips across car, bicycle, walking and public transit.

Each calculated route carries per-mode distance, duration and CO2 estimates, travel times adjusted from historical traffic for the current hour of the week, and EV charging stations near the start and end points.

Data sources: Google Directions for routing, OpenChargeMap for charging stations, Redis for traffic history.
    """,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "health", "description": "Health and readiness checks"},
        {"name": "routes", "description": "Route calculation"},
        {"name": "users", "description": "Stored route preferences and saved route history"},
    ],
)

settings = get_settings()

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

metrics_registry = MetricsRegistry()
app.state.metrics = metrics_registry

# Metrics before request logging so timing includes logging
app.add_middleware(MetricsMiddleware, registry=metrics_registry)
app.add_middleware(RequestLoggingMiddleware)

# Added last, executes first
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GreenRouteException)
async def greenroute_exception_handler(request: Request, exc: GreenRouteException):
    """Handle GreenRoute domain exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.__class__.__name__,
            "message": exc.message,
            "path": request.url.path,
        },
    )


@app.get("/health", tags=["health"])
async def health_check():
    """Basic liveness check."""
    return {"status": "healthy"}


@app.get("/ready", tags=["health"])
async def readiness_check(request: Request, db: Session = Depends(get_db)):
    """Readiness check for the database and the traffic history store."""
    database = "ok"
    try:
        db.execute(text("SELECT 1"))
    except Exception:
        database = "unavailable"

    redis_ok = await request.app.state.traffic_store.ping()

    ready = database == "ok" and redis_ok
    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "database": database,
            "traffic_store": "ok" if redis_ok else "unavailable",
        },
    )


@app.get("/metrics", tags=["health"])
async def get_metrics(request: Request):
    """Request counts, response times, and status codes."""
    return request.app.state.metrics.get_metrics()


app.include_router(routes.router, prefix="/api/v1/routes", tags=["routes"])
app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
