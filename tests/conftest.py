"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The production models carry no
PostgreSQL-only column types, so the real metadata is created directly.
Redis is replaced by an ``AsyncMock`` backed by a dict.
"""

from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.domain.entities import Location, Mission, Profile
from src.domain.enums import MissionStatus, Role, VehicleClass
from src.infrastructure.database import Base
from src.infrastructure.repositories import MissionRepository, ProfileRepository
from src.services.session import SessionContext


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# Port Harcourt
GARRISON = Location(4.8096, 7.0125)
RUMUOKORO = Location(4.8700, 6.9980)
TRANS_AMADI = Location(4.8130, 7.0550)
LAGOS = Location(6.5244, 3.3792)


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh schema per test; one shared in-memory connection."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def add_profile(db_session):
    """Insert a profile and return its ``SessionContext``."""

    async def _add(
        user_id: str,
        role: Optional[Role] = Role.CUSTOMER,
        *,
        full_name: str = "Test User",
        phone_number: str = "+2348000000000",
        is_online: bool = False,
        location: Optional[Location] = None,
    ) -> SessionContext:
        profile = Profile(
            id=user_id,
            role=role,
            full_name=full_name,
            phone_number=phone_number,
            is_online=is_online,
            location=location,
        )
        await ProfileRepository(db_session).insert(profile)
        await db_session.commit()
        return SessionContext(user_id, role or Role.CUSTOMER, profile)

    return _add


@pytest.fixture
def add_mission(db_session):
    """Insert a mission directly (bypassing quoting) and return it."""

    async def _add(
        customer_id: str,
        *,
        status: MissionStatus = MissionStatus.PENDING,
        driver_id: Optional[str] = None,
        pickup: Location = GARRISON,
        dropoff: Location = RUMUOKORO,
        price: int = 2300,
        rating: Optional[int] = None,
        vehicle: VehicleClass = VehicleClass.BIKE,
    ) -> Mission:
        mission = Mission(
            customer_id=customer_id,
            pickup="Pickup",
            pickup_location=pickup,
            dropoff="Dropoff",
            dropoff_location=dropoff,
            distance_km=7.1,
            vehicle=vehicle,
            price=price,
            status=status,
            delivery_pin="4821",
            driver_id=driver_id,
            rating=rating,
        )
        await MissionRepository(db_session).insert(mission)
        await db_session.commit()
        return mission

    return _add


@pytest.fixture
def fake_redis():
    store: dict[str, str] = {}
    client = AsyncMock()
    client.get = AsyncMock(side_effect=lambda key: store.get(key))
    client.set = AsyncMock(
        side_effect=lambda key, value, **kw: store.__setitem__(key, value)
    )
    client.store = store
    return client
