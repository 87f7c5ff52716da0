"""
Shared fixtures: an in-memory gateway with a controllable clock for the
services, and a TestClient over in-memory SQLite for the HTTP layer.
"""
import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# Keep the app's own engine off the working directory
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest

from gamezone.core.constants import ENTITIES
from gamezone.gateway import InMemoryGateway
from gamezone.services.catalog import ProductCatalog, RoomCatalog
from gamezone.services.order_composer import OrderComposer
from gamezone.services.scheduling import AppointmentScheduler
from gamezone.services.session_engine import SessionEngine

# Monday 2024-06-03 16:00 UTC
T0 = datetime(2024, 6, 3, 16, 0, tzinfo=timezone.utc)


class Clock:
    """Callable clock the tests move by hand"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def snapshot(gateway: InMemoryGateway) -> dict:
    """Every table of the gateway minus updated_at, for before/after comparisons"""
    return {
        entity: [{k: v for k, v in row.items() if k != "updated_at"} for row in gateway.list(entity)]
        for entity in ENTITIES
    }


@pytest.fixture
def clock():
    return Clock(T0)


@pytest.fixture
def gateway(clock):
    return InMemoryGateway(clock)


@pytest.fixture
def engine(gateway, clock):
    return SessionEngine(gateway, clock)


@pytest.fixture
def composer(gateway, clock):
    return OrderComposer(gateway, clock)


@pytest.fixture
def scheduler(gateway, clock):
    return AppointmentScheduler(gateway, clock)


@pytest.fixture
def room(gateway):
    """PS5 room at 25/h single, 35/h multiplayer"""
    return RoomCatalog(gateway).create("Room 1", "PS5")


@pytest.fixture
def other_room(gateway):
    return RoomCatalog(gateway).create("Room 2", "Xbox")


@pytest.fixture
def coffee(gateway):
    return ProductCatalog(gateway).create({"name": "Coffee", "category": "drinks", "price": Decimal("15"), "stock": 20})


@pytest.fixture
def chips(gateway):
    return ProductCatalog(gateway).create({"name": "Chips", "category": "snacks", "price": Decimal("10"), "stock": 2})


@pytest.fixture
def client():
    """TestClient on a fresh in-memory database"""
    from fastapi.testclient import TestClient
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool

    from gamezone.db.database import Base, SessionLocal, get_db
    from gamezone.main import app

    test_engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=test_engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.session_factory = TestingSessionLocal
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app.state.session_factory = SessionLocal
    Base.metadata.drop_all(bind=test_engine)
