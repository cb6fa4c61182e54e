"""
Role view endpoint
==================

GET /api/v1/views/me -- the caller's role view, composed fresh
"""

from typing import Union

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_actor, get_db
from src.api.middleware import limiter
from src.api.schemas import (
    AdminViewResponse,
    CustomerViewResponse,
    DriverViewResponse,
    view_response,
)
from src.config import settings
from src.services.session import SessionContext
from src.services.views import build_view

router = APIRouter(prefix="/views", tags=["views"])


@router.get(
    "/me",
    response_model=Union[CustomerViewResponse, DriverViewResponse, AdminViewResponse],
    summary="Get the caller's role view",
    description="Clients poll this every few seconds; there is no push channel.",
)
@limiter.limit(settings.api_rate_limit)
async def get_my_view(
    request: Request,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    return view_response(await build_view(db, actor), actor)
