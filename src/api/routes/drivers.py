"""
Driver endpoints
================

PUT  /api/v1/drivers/me/online          -- go online / offline
POST /api/v1/drivers/me/online/restore  -- cold-start: re-apply saved preference
PUT  /api/v1/drivers/me/location        -- report last-known coordinates
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_actor, get_db, get_preferences
from src.api.middleware import limiter
from src.api.schemas import LocationRequest, OnlineRequest, ProfileResponse
from src.config import settings
from src.domain.entities import Location
from src.domain.enums import Role
from src.domain.lifecycle import require_role
from src.infrastructure.preferences import (
    OnlinePreferenceStore,
    restore_online,
    set_online,
)
from src.infrastructure.repositories import ProfileRepository
from src.services.session import SessionContext

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.put("/me/online", response_model=ProfileResponse, summary="Set online flag")
@limiter.limit(settings.api_rate_limit)
async def put_online(
    request: Request,
    body: OnlineRequest,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
    preferences: OnlinePreferenceStore = Depends(get_preferences),
):
    require_role(actor, Role.DRIVER)
    repo = ProfileRepository(db)
    await set_online(repo, preferences, actor.user_id, body.is_online)
    return ProfileResponse.from_entity(await repo.get(actor.user_id))


@router.post(
    "/me/online/restore",
    response_model=ProfileResponse,
    summary="Re-apply the saved online preference",
)
@limiter.limit(settings.api_rate_limit)
async def post_restore_online(
    request: Request,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
    preferences: OnlinePreferenceStore = Depends(get_preferences),
):
    require_role(actor, Role.DRIVER)
    repo = ProfileRepository(db)
    await restore_online(repo, preferences, actor.user_id)
    return ProfileResponse.from_entity(await repo.get(actor.user_id))


@router.put("/me/location", response_model=ProfileResponse, summary="Update location")
@limiter.limit(settings.api_rate_limit)
async def put_location(
    request: Request,
    body: LocationRequest,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    require_role(actor, Role.DRIVER)
    repo = ProfileRepository(db)
    await repo.update(actor.user_id, location=Location(body.latitude, body.longitude))
    return ProfileResponse.from_entity(await repo.get(actor.user_id))
