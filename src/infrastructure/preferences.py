"""
Driver online preference, kept in Redis.

This flag is separate from ``profiles.is_online``.  The two are written
together on every toggle and reconciled at cold start by
``restore_online``; an edit made to only one side (e.g. the profile row
changed directly in the database) is not noticed.
"""

from __future__ import annotations

import logging
from typing import Optional

import redis.asyncio as aioredis

from .repositories import ProfileRepository

logger = logging.getLogger(__name__)


class OnlinePreferenceStore:
    def __init__(self, client: aioredis.Redis, prefix: str = "driver_online"):
        self.redis = client
        self.prefix = prefix

    def _key(self, driver_id: str) -> str:
        return f"{self.prefix}:{driver_id}"

    async def get(self, driver_id: str) -> Optional[bool]:
        """Stored preference, or None if the driver never toggled."""
        raw = await self.redis.get(self._key(driver_id))
        if raw is None:
            return None
        return raw == "true"

    async def set(self, driver_id: str, online: bool) -> None:
        await self.redis.set(self._key(driver_id), "true" if online else "false")


async def set_online(
    profiles: ProfileRepository,
    preferences: OnlinePreferenceStore,
    driver_id: str,
    online: bool,
) -> bool:
    """Write the online flag to the profile row and the local preference."""
    await profiles.update(driver_id, is_online=online)
    await preferences.set(driver_id, online)
    logger.info("Driver %s is now %s", driver_id, "ONLINE" if online else "OFFLINE")
    return online


async def restore_online(
    profiles: ProfileRepository,
    preferences: OnlinePreferenceStore,
    driver_id: str,
) -> bool:
    """Cold-start sync: push the stored preference to the profile row."""
    stored = await preferences.get(driver_id)
    if stored is None:
        profile = await profiles.get(driver_id)
        return bool(profile and profile.is_online)
    await profiles.update(driver_id, is_online=stored)
    return stored
