"""Pytest configuration and fixtures."""

import os
from typing import Generator
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"  # Disable rate limiting in tests

from fakes import (
    make_charging_locator,
    make_directions,
    make_segment,
    make_station,
    make_traffic_store,
)
from greenroute.db.base import Base, get_db
from greenroute.dependencies import get_route_service
from greenroute.main import app
from greenroute.repositories.route_repository import RouteRepository
from greenroute.schemas.route import TransportMode
from greenroute.services.route_service import RouteService


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh in-memory database for each test."""
    # StaticPool keeps one connection so the app and the test share the same database
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def directions() -> Mock:
    """Directions fake answering car and bicycle between Berlin and Munich."""
    return make_directions(
        {
            TransportMode.CAR: make_segment(TransportMode.CAR, 584000, 19800),
            TransportMode.BICYCLE: make_segment(TransportMode.BICYCLE, 500000, 18000),
        }
    )


@pytest.fixture
def traffic_store() -> Mock:
    return make_traffic_store()


@pytest.fixture
def charging_locator() -> Mock:
    return make_charging_locator([make_station(1), make_station(2)])


@pytest.fixture(scope="function")
def client(
    db: Session, directions: Mock, traffic_store: Mock, charging_locator: Mock
) -> Generator[TestClient, None, None]:
    """Test client with the database and external collaborators overridden."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    def override_get_route_service():
        return RouteService(
            directions=directions,
            traffic_store=traffic_store,
            charging_locator=charging_locator,
            route_store=RouteRepository(db),
        )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_route_service] = override_get_route_service

    with TestClient(app) as test_client:
        # Replaces the store built at startup; shutdown closes this one
        app.state.traffic_store = traffic_store
        yield test_client

    app.dependency_overrides.clear()
