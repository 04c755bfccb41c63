"""Shared test fixtures — per-test SQLite database, FastAPI test client, data builders.

Invariants:
    - Every test gets a fresh SQLite database file under tmp_path
    - get_db dependency overridden to use the test database
    - The expiration monitor, schema creation and demo seeding are disabled
      (httpx's ASGITransport does not run the lifespan anyway)
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("EXPIRATION_MONITOR_ENABLED", "false")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("CREATE_SCHEMA_ON_STARTUP", "false")
os.environ.setdefault("APP_ENV", "test")

from datetime import date, timedelta  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, async_sessionmaker, create_async_engine,
)

import app.domain  # noqa: E402,F401
from app.db.base import Base, get_db  # noqa: E402
from app.domain.car import Car  # noqa: E402
from app.domain.owner import Owner  # noqa: E402
from app.domain.policy import InsurancePolicy  # noqa: E402
from app.main import app as fastapi_app  # noqa: E402


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=fastapi_app), base_url="http://test",
    ) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_owner(test_db):
    async def _make(name="Test Owner", email="test@example.com"):
        owner = Owner(name=name, email=email)
        test_db.add(owner)
        await test_db.commit()
        return owner
    return _make


@pytest.fixture
def make_car(test_db, make_owner):
    async def _make(vin="TEST123", owner=None, make="Test", model="Car", year=2020):
        owner = owner or await make_owner()
        car = Car(vin=vin, make=make, model=model, year_of_manufacture=year, owner_id=owner.id)
        test_db.add(car)
        await test_db.commit()
        return car
    return _make


@pytest.fixture
def make_policy(test_db, make_car):
    """Create a policy (and a car + owner unless *car* is given)."""
    async def _make(end_date, car=None, provider="Test Provider", start_date=None):
        car = car or await make_car()
        if start_date is None:
            start_date = (end_date or date(2026, 1, 1)) - timedelta(days=30)
        policy = InsurancePolicy(
            car_id=car.id, provider=provider, start_date=start_date, end_date=end_date,
        )
        test_db.add(policy)
        await test_db.commit()
        return policy
    return _make
