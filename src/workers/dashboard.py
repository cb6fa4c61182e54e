"""
Background Admin Dashboard Worker
=================================

Runs every ``POLL_INTERVAL_SECONDS`` (default 5 s) and keeps the latest
admin overview cached for ``GET /api/v1/admin/overview``.

Revenue and the other aggregates are recomputed from every mission row
on each cycle.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.config import settings
from src.infrastructure.database import async_session_factory
from src.infrastructure.repositories import MissionRepository, ProfileRepository
from src.services.views import AdminView, build_admin_view
from src.workers.poller import ViewPoller

logger = logging.getLogger(__name__)

_poller: ViewPoller[AdminView] | None = None


# ── Public API ────────────────────────────────────────────────────────


async def start_dashboard_loop() -> None:
    global _poller
    _poller = ViewPoller(
        "admin-dashboard",
        refresh_admin_overview,
        interval_seconds=settings.poll_interval_seconds,
    )
    _poller.start()


async def stop_dashboard_loop() -> None:
    global _poller
    if _poller:
        await _poller.stop()
    _poller = None


def cached_overview() -> Optional[AdminView]:
    return _poller.latest if _poller else None


async def refresh_admin_overview() -> AdminView:
    async with async_session_factory() as session:
        view = await build_admin_view(
            MissionRepository(session), ProfileRepository(session)
        )
    logger.debug(
        "Dashboard refreshed: %d missions, revenue %d",
        len(view.missions), view.revenue,
    )
    return view
