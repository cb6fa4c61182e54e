"""FastAPI dependency injection helpers."""

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.pricing import PricingEngine
from src.infrastructure.database import async_session_factory
from src.infrastructure.geo_client import GeoClient
from src.infrastructure.preferences import OnlinePreferenceStore
from src.infrastructure.redis_client import get_redis
from src.infrastructure.repositories import ProfileRepository
from src.services.session import SessionContext, context_for


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_actor(
    x_user_id: str = Header(..., alias="X-User-Id"),
    db: AsyncSession = Depends(get_db),
) -> SessionContext:
    """Resolve the authenticated identity into a session context."""
    profile = await ProfileRepository(db).get(x_user_id)
    if profile is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return context_for(profile)


def get_geo_client() -> GeoClient:
    return GeoClient.from_settings(settings)


def get_pricing() -> PricingEngine:
    return PricingEngine.from_settings(settings)


async def get_preferences() -> OnlinePreferenceStore:
    return OnlinePreferenceStore(await get_redis())
