"""
Application session context.

``SessionContext`` is the explicit "who is acting, in which role" object
handed to every component that needs it.  ``SessionManager`` is the one
place auth-state changes enter the application; everything else
subscribes to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from src.domain.entities import Profile
from src.domain.enums import Role

logger = logging.getLogger(__name__)

ProfileLoader = Callable[[str], Awaitable[Optional[Profile]]]
SessionListener = Callable[[Optional["SessionContext"]], Awaitable[None]]


@dataclass(frozen=True)
class SessionContext:
    user_id: str
    role: Role
    profile: Optional[Profile] = None


def resolve_role(role: Optional[Role], user_id: str = "") -> Role:
    """Missing or unrecognised roles fall back to the customer view."""
    if role is None:
        logger.warning("No valid role for %s, defaulting to customer", user_id)
        return Role.CUSTOMER
    return role


def context_for(profile: Profile) -> SessionContext:
    return SessionContext(
        user_id=profile.id,
        role=resolve_role(profile.role, profile.id),
        profile=profile,
    )


class SessionManager:
    def __init__(self, load_profile: ProfileLoader):
        self._load_profile = load_profile
        self._current: Optional[SessionContext] = None
        self._listeners: list[SessionListener] = []

    @property
    def current(self) -> Optional[SessionContext]:
        return self._current

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def on_auth_state_change(
        self, user_id: Optional[str]
    ) -> Optional[SessionContext]:
        """Called with the signed-in user id, or None on sign-out."""
        if user_id is None:
            self._current = None
        else:
            try:
                profile = await self._load_profile(user_id)
            except Exception:
                logger.exception("Profile lookup failed for %s", user_id)
                profile = None
            if profile is None:
                self._current = SessionContext(user_id, resolve_role(None, user_id))
            else:
                self._current = context_for(profile)

        for listener in list(self._listeners):
            await listener(self._current)
        return self._current
