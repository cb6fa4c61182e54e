"""Driver online preference: Redis flag kept alongside the profile row."""

from unittest.mock import AsyncMock, patch

import pytest

from src.domain.enums import Role
from src.infrastructure.preferences import (
    OnlinePreferenceStore,
    restore_online,
    set_online,
)
from src.infrastructure.repositories import ProfileRepository


@pytest.mark.asyncio
async def test_get_unset_preference(fake_redis):
    assert await OnlinePreferenceStore(fake_redis).get("drv-a") is None


@pytest.mark.asyncio
async def test_set_online_writes_both_sides(db_session, add_profile, fake_redis):
    await add_profile("drv-a", Role.DRIVER)
    prefs = OnlinePreferenceStore(fake_redis)
    profiles = ProfileRepository(db_session)

    assert await set_online(profiles, prefs, "drv-a", True) is True
    assert fake_redis.store == {"driver_online:drv-a": "true"}
    assert (await profiles.get("drv-a")).is_online is True

    await set_online(profiles, prefs, "drv-a", False)
    assert await prefs.get("drv-a") is False
    assert (await profiles.get("drv-a")).is_online is False


@pytest.mark.asyncio
async def test_restore_pushes_stored_preference(db_session, add_profile, fake_redis):
    await add_profile("drv-a", Role.DRIVER, is_online=False)
    fake_redis.store["driver_online:drv-a"] = "true"
    profiles = ProfileRepository(db_session)

    assert await restore_online(profiles, OnlinePreferenceStore(fake_redis), "drv-a")
    assert (await profiles.get("drv-a")).is_online is True


@pytest.mark.asyncio
async def test_restore_without_preference_keeps_row(db_session, add_profile, fake_redis):
    await add_profile("drv-a", Role.DRIVER, is_online=True)
    profiles = ProfileRepository(db_session)

    assert await restore_online(profiles, OnlinePreferenceStore(fake_redis), "drv-a")
    assert fake_redis.store == {}
    assert (await profiles.get("drv-a")).is_online is True


@pytest.mark.asyncio
async def test_redis_pool_is_lazy_and_closed_on_shutdown():
    from src.infrastructure import redis_client

    client = await redis_client.get_redis()
    pool = client.connection_pool
    assert redis_client._pool is pool
    assert (await redis_client.get_redis()).connection_pool is pool

    with patch.object(pool, "disconnect", new_callable=AsyncMock) as disconnect:
        await redis_client.close_redis()
    disconnect.assert_awaited_once()
    assert redis_client._pool is None
