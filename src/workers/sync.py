"""
Session-scoped view synchronisation.

Keeps exactly one ``ViewPoller`` alive for the current session.  Every
auth-state change tears down the previous session's poller before the
next one starts, so a signed-out or switched user never receives updates
meant for the old view.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config import settings
from src.services.session import SessionContext, SessionManager
from src.services.views import RoleView, build_view
from src.workers.poller import ViewPoller

logger = logging.getLogger(__name__)


class ViewSynchronizer:
    def __init__(
        self,
        sessions: SessionManager,
        session_factory: async_sessionmaker[AsyncSession],
        interval_seconds: float = settings.poll_interval_seconds,
        on_update: Optional[Callable[[RoleView], Any]] = None,
    ):
        self.session_factory = session_factory
        self.interval = interval_seconds
        self.on_update = on_update
        self.poller: Optional[ViewPoller[RoleView]] = None
        self._unsubscribe = sessions.subscribe(self._on_session)

    async def _on_session(self, ctx: Optional[SessionContext]) -> None:
        if self.poller is not None:
            await self.poller.stop()
            self.poller = None
        if ctx is None:
            return

        async def refresh() -> RoleView:
            async with self.session_factory() as session:
                return await build_view(session, ctx)

        self.poller = ViewPoller(
            f"{ctx.role.value}:{ctx.user_id}",
            refresh,
            interval_seconds=self.interval,
            on_update=self.on_update,
        )
        self.poller.start()

    async def close(self) -> None:
        self._unsubscribe()
        if self.poller is not None:
            await self.poller.stop()
            self.poller = None
