"""
Admin / observability endpoints
===============================

GET /api/v1/admin/overview -- missions, fleet and revenue (cached by the dashboard worker)
GET /api/v1/admin/health   -- simple health check
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_actor, get_db
from src.api.middleware import limiter
from src.api.schemas import AdminViewResponse, HealthResponse, view_response
from src.config import settings
from src.domain.enums import Role
from src.domain.lifecycle import require_role
from src.infrastructure.repositories import MissionRepository, ProfileRepository
from src.services.session import SessionContext
from src.services.views import build_admin_view
from src.workers import dashboard

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/overview",
    response_model=AdminViewResponse,
    summary="Fleet, missions and revenue",
)
@limiter.limit(settings.api_rate_limit)
async def get_overview(
    request: Request,
    actor: SessionContext = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    require_role(actor, Role.ADMIN)
    view = dashboard.cached_overview()
    if view is None:
        view = await build_admin_view(MissionRepository(db), ProfileRepository(db))
    return view_response(view, actor)


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
