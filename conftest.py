import pytest
import uuid
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from freightdesk.main import app
from freightdesk.db.session import get_db
from freightdesk.models.base import Base
from freightdesk.models.pricing_rule import PricingRule
from freightdesk.models.quote import Quote
from freightdesk.models.vehicle_type import VehicleType
from freightdesk.core.dependencies import get_clock, get_route_provider
from freightdesk.core.enums import PricingSource, QuoteStatus
from freightdesk.core.errors import RouteNotFound
from freightdesk.schemas.pricing import GeoPoint, RouteMeasurement


TEST_DATABASE_URL = "sqlite+aiosqlite://"

FROZEN_NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, now: datetime = FROZEN_NOW):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class StubRouteProvider:
    """Route provider double: known routes by (origin, destination), else RouteNotFound."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, origin: str, destination: str, km: float, minutes: float = 60.0,
            origin_country: str = "Spain", destination_country: str = "Spain"):
        self.routes[(origin, destination)] = RouteMeasurement(
            distance_km=km,
            duration_min=minutes,
            origin_country=origin_country,
            destination_country=destination_country,
            origin_label=origin,
            destination_label=destination,
            origin_coords=GeoPoint(lat=40.4168, lng=-3.7038),
            destination_coords=GeoPoint(lat=41.3874, lng=2.1686),
        )

    async def measure(self, origin: str, destination: str) -> RouteMeasurement:
        self.calls.append((origin, destination))
        try:
            return self.routes[(origin, destination)]
        except KeyError:
            raise RouteNotFound(f"No route between {origin} and {destination}")


@pytest.fixture
def frozen_clock():
    return FrozenClock()


@pytest.fixture
def route_provider():
    provider = StubRouteProvider()
    provider.add("Madrid", "Barcelona", 620.0, 360.0)
    provider.add("Madrid", "Toledo", 72.5, 55.0)
    return provider


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def test_client(session_factory, frozen_clock, route_provider):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: frozen_clock
    app.dependency_overrides[get_route_provider] = lambda: route_provider

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def catalog(db_session):
    """Two vehicles and a Spanish zone table."""
    van = VehicleType(name="Furgoneta", capacity="1500 kg", price_per_km=1.2,
                      direction_price=30.0, minimum_price=60.0, is_active=True)
    truck = VehicleType(name="Camion", capacity="12000 kg", price_per_km=2.0,
                        direction_price=80.0, minimum_price=150.0, is_active=True)
    retired = VehicleType(name="Moto", price_per_km=0.5, is_active=False)
    rules = [
        PricingRule(zone=1, name="Zona 1 - Local", country="Spain", min_km=0, max_km=50,
                    base_price=40.0, price_per_km=1.0, min_price=50.0),
        PricingRule(zone=2, name="Zona 2 - Regional", country="Spain", min_km=50, max_km=150,
                    base_price=60.0, price_per_km=0.9, toll_surcharge_pct=5.0, min_price=90.0),
    ]
    db_session.add_all([van, truck, retired, *rules])
    await db_session.commit()
    return {"van": van, "truck": truck, "retired": retired, "rules": rules}


@pytest.fixture
def quote_factory(db_session):
    async def _create_quote(status=QuoteStatus.APPROVED, **kwargs):
        data = {
            "origin": "Madrid",
            "destination": "Toledo",
            "distance": 72.5,
            "duration": 55.0,
            "vehicle_type_name": "Furgoneta",
            "pricing_source": PricingSource.VEHICLE_RATE,
            "base_price": 30.0,
            "distance_cost": 87.0,
            "total_price": 117.0,
            "status": status,
        }
        data.update(kwargs)
        quote = Quote(**data)
        db_session.add(quote)
        await db_session.commit()
        await db_session.refresh(quote)
        return quote

    return _create_quote


@pytest.fixture
def valid_idempotency_key():
    return str(uuid.uuid4())


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests that go through the HTTP API"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "delivery_notes: marks tests related to delivery notes"
    )
    config.addinivalue_line(
        "markers", "webhooks: marks tests related to webhooks"
    )
    config.addinivalue_line(
        "markers", "audit: marks tests related to audit logging"
    )
    config.addinivalue_line(
        "markers", "idempotency: marks tests related to idempotency"
    )
    config.addinivalue_line(
        "markers", "rate_limit: marks tests related to rate limiting"
    )
