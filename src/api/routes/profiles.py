"""
Profile endpoints
=================

POST  /api/v1/profiles     -- signup: create a customer profile
GET   /api/v1/profiles/me  -- own profile
PATCH /api/v1/profiles/me  -- update contact details
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_actor, get_db
from src.api.middleware import limiter
from src.api.schemas import ProfileCreateRequest, ProfileResponse, ProfileUpdateRequest
from src.config import settings
from src.domain.entities import Profile
from src.domain.enums import Role
from src.infrastructure.repositories import ProfileRepository
from src.services.session import SessionContext

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post(
    "",
    status_code=201,
    response_model=ProfileResponse,
    summary="Create a profile at signup",
    description="New accounts are always customers; other roles are provisioned out-of-band.",
)
@limiter.limit(settings.api_rate_limit)
async def create_profile(
    request: Request,
    body: ProfileCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = ProfileRepository(db)
    if await repo.get(body.id):
        raise HTTPException(status_code=409, detail="Profile already exists")
    profile = Profile(
        id=body.id,
        role=Role.CUSTOMER,
        full_name=body.full_name,
        phone_number=body.phone_number,
        email=body.email,
    )
    await repo.insert(profile)
    return ProfileResponse.from_entity(profile)


@router.get("/me", response_model=ProfileResponse, summary="Get own profile")
@limiter.limit(settings.api_rate_limit)
async def get_my_profile(
    request: Request,
    actor: SessionContext = Depends(get_actor),
):
    return ProfileResponse.from_entity(actor.profile)


@router.patch("/me", response_model=ProfileResponse, summary="Update contact details")
@limiter.limit(settings.api_rate_limit)
async def update_my_profile(
    request: Request,
    body: ProfileUpdateRequest,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    repo = ProfileRepository(db)
    changes = body.model_dump(exclude_unset=True)
    if changes:
        await repo.update(actor.user_id, **changes)
    return ProfileResponse.from_entity(await repo.get(actor.user_id))
