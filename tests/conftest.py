"""Pytest fixtures for the EcoRank API and scoring tests."""

import os

# Must be set before config.settings is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["IDENTITY_JWT_SECRET"] = "test-identity-secret-with-at-least-32-chars"
os.environ.pop("REDIS_URL", None)
os.environ.pop("IDENTITY_AUDIENCE", None)

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

import models.index  # noqa: F401
from config.database import Base, SessionLocal, engine, get_db
from helpers.route_provider import ProviderError, RouteInfo
from helpers.token_helper import create_identity_token
from helpers.vehicle_provider import VehicleMake, VehicleModel, estimate_emissions
from utils.cache_utils import CacheManager, MemoryCacheBackend, RateLimiter
from utils.deps import get_cache, get_clock, get_rate_limiter, get_route_provider, get_vehicle_provider


class FakeClock:
    """Controllable time source: call it for naive UTC, .monotonic() for seconds."""

    def __init__(self, start: datetime = datetime(2025, 3, 4, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def monotonic(self) -> float:
        return self.now.timestamp()

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeRouteProvider:
    def __init__(self):
        self.calls = []
        self.fail = False

    def calculate_route(self, origin, destination, mode="driving"):
        self.calls.append((origin, destination, mode))
        if self.fail:
            raise ProviderError("Route lookup failed")
        return RouteInfo(
            start_address=f"{origin}, Springfield",
            end_address=f"{destination}, Springfield",
            distance_km=12.4,
            duration_minutes=75,
        )


class FakeVehicleProvider:
    def __init__(self):
        self.fail = False
        self.makes = [VehicleMake(id=441, name="TESLA"), VehicleMake(id=448, name="TOYOTA")]

    def get_makes(self):
        if self.fail:
            raise ProviderError("Vehicle data lookup failed")
        return self.makes

    def search_makes(self, term):
        return [m for m in self.get_makes() if term.lower() in m.name.lower()]

    def get_models(self, make_id):
        if self.fail:
            raise ProviderError("Vehicle data lookup failed")
        return [VehicleModel(id=2208, name="Prius", make_id=make_id)]

    def get_emissions(self, make, model, year):
        return estimate_emissions(make, model, year)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_session():
    """Fresh schema per test on the shared in-memory engine."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def cache(clock):
    return CacheManager(MemoryCacheBackend(clock=clock.monotonic), default_ttl=300)


@pytest.fixture
def limiter(clock):
    return RateLimiter(limit=5, window_seconds=60, clock=clock.monotonic)


@pytest.fixture
def route_provider():
    return FakeRouteProvider()


@pytest.fixture
def vehicle_provider():
    return FakeVehicleProvider()


@pytest.fixture
def client(db_session, cache, limiter, clock, route_provider, vehicle_provider):
    from main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_route_provider] = lambda: route_provider
    app.dependency_overrides[get_vehicle_provider] = lambda: vehicle_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user_id: str, name: str = "") -> dict:
    return {"Authorization": f"Bearer {create_identity_token(user_id, name or user_id.title())}"}


@pytest.fixture
def alice():
    return auth_headers("alice", "Alice")


@pytest.fixture
def bob():
    return auth_headers("bob", "Bob")


@pytest.fixture
def carol():
    return auth_headers("carol", "Carol")


@pytest.fixture
def crew(client, alice, bob):
    """A crew led by alice with bob as a member."""
    resp = client.post("/api/crews/", json={"name": "Green Team", "description": "Saving the planet daily"}, headers=alice)
    assert resp.status_code == 201, resp.text
    data = resp.json()
    resp = client.post("/api/crews/join", json={"join_code": data["join_code"].lower()}, headers=bob)
    assert resp.status_code == 200, resp.text
    return data


@pytest.fixture
def make_challenge(client, crew, clock, alice):
    def _make(challenge_type: str = "recycling", lower_score_is_better: bool = False, days: int = 7, **extra):
        body = {
            "title": f"{challenge_type.title()} week",
            "type": challenge_type,
            "start_date": (clock() - timedelta(hours=1)).isoformat(),
            "end_date": (clock() + timedelta(days=days)).isoformat(),
            "lower_score_is_better": lower_score_is_better,
            **extra,
        }
        resp = client.post("/api/challenges/", json=body, headers=alice)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make
