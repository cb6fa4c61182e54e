"""
Mission endpoints
=================

POST   /api/v1/missions                 -- place an order (customer)
GET    /api/v1/missions/{id}            -- read one mission
POST   /api/v1/missions/{id}/accept     -- pending -> in_progress (any driver)
POST   /api/v1/missions/{id}/arrive     -- in_progress -> arrived (assigned driver)
POST   /api/v1/missions/{id}/complete   -- arrived -> completed (assigned driver)
POST   /api/v1/missions/{id}/rating     -- rate a completed mission (customer)
DELETE /api/v1/missions/{id}            -- cancel a pending mission (customer)
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_actor, get_db, get_geo_client, get_pricing
from src.api.middleware import limiter
from src.api.schemas import (
    MissionCreateRequest,
    MissionResponse,
    PlacedMissionResponse,
    QuoteResponse,
    RatingRequest,
    mission_response,
)
from src.config import settings
from src.domain import lifecycle
from src.domain.entities import InvalidStateTransition, Mission
from src.domain.enums import MissionStatus
from src.domain.pricing import PricingEngine
from src.infrastructure.geo_client import GeoClient
from src.infrastructure.repositories import MissionRepository
from src.services.orders import place_order
from src.services.session import SessionContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/missions", tags=["missions"])


async def _load(repo: MissionRepository, mission_id: int) -> Mission:
    mission = await repo.get(mission_id)
    if not mission:
        raise HTTPException(status_code=404, detail="Mission not found")
    return mission


async def _apply(
    db: AsyncSession,
    mission_id: int,
    actor: SessionContext,
    operation: Callable[[Mission, SessionContext], dict[str, Any]],
) -> MissionResponse:
    repo = MissionRepository(db)
    mission = await _load(repo, mission_id)
    changes = operation(mission, actor)
    written = await repo.update(
        mission_id, when_status=lifecycle.write_precondition(changes), **changes
    )
    if not written:
        raise InvalidStateTransition(
            f"Mission {mission_id} changed before this update was written"
        )
    logger.info(
        "Mission %s -> %s by %s", mission_id, mission.status.value, actor.user_id
    )
    return mission_response(mission, actor)


@router.post(
    "",
    status_code=201,
    response_model=PlacedMissionResponse,
    summary="Place a delivery order",
    description=(
        "Routes and prices the trip on the server, then stores it as a "
        "pending mission with a freshly generated 4-digit PIN.  If routing "
        "is unavailable the straight-line distance is used."
    ),
)
@limiter.limit(settings.api_rate_limit)
async def create_mission(
    request: Request,
    body: MissionCreateRequest,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
    geo: GeoClient = Depends(get_geo_client),
    pricing: PricingEngine = Depends(get_pricing),
):
    mission, quote = await place_order(
        MissionRepository(db),
        geo,
        pricing,
        actor,
        pickup=body.pickup,
        pickup_location=body.pickup_location,
        dropoff=body.dropoff,
        dropoff_location=body.dropoff_location,
        vehicle=body.vehicle,
    )
    return PlacedMissionResponse(
        mission=mission_response(mission, actor),
        quote=QuoteResponse.from_quote(quote),
    )


@router.get("/{mission_id}", response_model=MissionResponse, summary="Get a mission")
@limiter.limit(settings.api_rate_limit)
async def get_mission(
    request: Request,
    mission_id: int,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    mission = await _load(MissionRepository(db), mission_id)
    return mission_response(mission, actor)


@router.post(
    "/{mission_id}/accept",
    response_model=MissionResponse,
    summary="Accept a pending mission",
    description=(
        "Assigns the calling driver.  There is no compare-and-set: if two "
        "drivers accept the same mission, both calls succeed and the last "
        "write is kept."
    ),
)
@limiter.limit(settings.api_rate_limit)
async def accept_mission(
    request: Request,
    mission_id: int,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await _apply(db, mission_id, actor, lifecycle.accept)


@router.post(
    "/{mission_id}/arrive",
    response_model=MissionResponse,
    summary="Mark the assigned driver as arrived",
)
@limiter.limit(settings.api_rate_limit)
async def arrive_mission(
    request: Request,
    mission_id: int,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await _apply(db, mission_id, actor, lifecycle.mark_arrived)


@router.post(
    "/{mission_id}/complete",
    response_model=MissionResponse,
    summary="Complete a delivery",
)
@limiter.limit(settings.api_rate_limit)
async def complete_mission(
    request: Request,
    mission_id: int,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await _apply(db, mission_id, actor, lifecycle.complete)


@router.post(
    "/{mission_id}/rating",
    response_model=MissionResponse,
    summary="Rate a completed mission",
)
@limiter.limit(settings.api_rate_limit)
async def rate_mission(
    request: Request,
    mission_id: int,
    body: RatingRequest,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return await _apply(
        db,
        mission_id,
        actor,
        lambda mission, who: lifecycle.rate(mission, who, body.stars),
    )


@router.delete(
    "/{mission_id}",
    status_code=204,
    summary="Cancel a pending mission",
    description="Deletes the mission.  Only its customer may cancel, and only while pending.",
)
@limiter.limit(settings.api_rate_limit)
async def cancel_mission(
    request: Request,
    mission_id: int,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    repo = MissionRepository(db)
    mission = await _load(repo, mission_id)
    lifecycle.check_cancel(mission, actor)
    if not await repo.delete(mission_id, when_status=MissionStatus.PENDING):
        raise InvalidStateTransition(f"Mission {mission_id} is no longer pending")
    logger.info("Mission %s cancelled by %s", mission_id, actor.user_id)
    return Response(status_code=204)
