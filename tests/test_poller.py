"""
Polling and session-switching tests.

* ``ViewPoller`` -- single-flight refresh, stop semantics, error survival
* ``SessionManager`` -- role fallback and listener fan-out
* ``ViewSynchronizer`` -- one live poller per session
"""

import asyncio
from unittest.mock import patch

import pytest

from src.domain.entities import Profile
from src.domain.enums import Role
from src.infrastructure.repositories import ProfileRepository
from src.services.session import SessionManager
from src.services.views import CustomerView, DriverView
from src.workers.poller import ViewPoller
from src.workers.sync import ViewSynchronizer


class TestViewPoller:
    @pytest.mark.asyncio
    async def test_poll_once_publishes_latest(self):
        seen = []

        async def refresh():
            return 42

        poller = ViewPoller("test", refresh, on_update=seen.append)
        assert await poller.poll_once() == 42
        assert poller.latest == 42
        assert seen == [42]

    @pytest.mark.asyncio
    async def test_overlapping_polls_share_one_refresh(self):
        calls = 0
        release = asyncio.Event()

        async def refresh():
            nonlocal calls
            calls += 1
            await release.wait()
            return calls

        poller = ViewPoller("test", refresh)
        first = asyncio.create_task(poller.poll_once())
        second = asyncio.create_task(poller.poll_once())
        await asyncio.sleep(0.01)
        release.set()

        assert await asyncio.gather(first, second) == [1, 1]
        assert calls == 1

    @pytest.mark.asyncio
    async def test_stop_drops_inflight_refresh(self):
        started = asyncio.Event()
        release = asyncio.Event()
        seen = []

        async def refresh():
            started.set()
            await release.wait()
            return "late"

        poller = ViewPoller("test", refresh, interval_seconds=60, on_update=seen.append)
        poller.start()
        await asyncio.wait_for(started.wait(), timeout=1)

        await poller.stop()
        release.set()
        await asyncio.sleep(0.01)

        assert not poller.running
        assert seen == []
        assert poller.latest is None
        assert await poller.poll_once() is None

    @pytest.mark.asyncio
    async def test_loop_survives_refresh_errors(self):
        calls = 0

        async def refresh():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("store unavailable")
            return calls

        poller = ViewPoller("test", refresh, interval_seconds=0.01)
        poller.start()
        for _ in range(100):
            if poller.latest is not None:
                break
            await asyncio.sleep(0.01)
        await poller.stop()

        assert calls >= 2
        assert poller.latest >= 2

    @pytest.mark.asyncio
    async def test_async_on_update_is_awaited(self):
        seen = []

        async def refresh():
            return "view"

        async def on_update(view):
            seen.append(view)

        await ViewPoller("test", refresh, on_update=on_update).poll_once()
        assert seen == ["view"]


class TestSessionManager:
    @staticmethod
    def _manager(profiles: dict):
        async def load(user_id):
            return profiles.get(user_id)

        return SessionManager(load)

    @pytest.mark.asyncio
    async def test_known_role(self):
        manager = self._manager({"drv-a": Profile(id="drv-a", role=Role.DRIVER)})
        ctx = await manager.on_auth_state_change("drv-a")
        assert ctx.role == Role.DRIVER
        assert manager.current is ctx

    @pytest.mark.asyncio
    async def test_missing_profile_or_role_defaults_to_customer(self):
        manager = self._manager({"odd": Profile(id="odd", role=None)})
        assert (await manager.on_auth_state_change("odd")).role == Role.CUSTOMER
        assert (await manager.on_auth_state_change("ghost")).role == Role.CUSTOMER

    @pytest.mark.asyncio
    async def test_failing_lookup_defaults_to_customer(self):
        async def load(user_id):
            raise ConnectionError("store down")

        ctx = await SessionManager(load).on_auth_state_change("cust-1")
        assert ctx.role == Role.CUSTOMER

    @pytest.mark.asyncio
    async def test_listeners_and_sign_out(self):
        manager = self._manager({})
        events = []

        async def listener(ctx):
            events.append(ctx.user_id if ctx else None)

        unsubscribe = manager.subscribe(listener)
        await manager.on_auth_state_change("cust-1")
        await manager.on_auth_state_change(None)
        unsubscribe()
        await manager.on_auth_state_change("cust-2")

        assert events == ["cust-1", None]
        assert manager.current.user_id == "cust-2"


class TestViewSynchronizer:
    @pytest.mark.asyncio
    async def test_switches_poller_with_session(self, session_factory, add_profile):
        await add_profile("cust-1")
        await add_profile("drv-a", Role.DRIVER)

        async def load(user_id):
            async with session_factory() as session:
                return await ProfileRepository(session).get(user_id)

        updates = asyncio.Queue()
        manager = SessionManager(load)
        sync = ViewSynchronizer(
            manager, session_factory, interval_seconds=60, on_update=updates.put_nowait
        )

        await manager.on_auth_state_change("cust-1")
        first = sync.poller
        assert isinstance(await asyncio.wait_for(updates.get(), 1), CustomerView)

        await manager.on_auth_state_change("drv-a")
        assert not first.running
        assert sync.poller is not first
        assert isinstance(await asyncio.wait_for(updates.get(), 1), DriverView)

        second = sync.poller
        await manager.on_auth_state_change(None)
        assert sync.poller is None
        assert not second.running

        await sync.close()
        await manager.on_auth_state_change("cust-1")
        assert sync.poller is None


class TestDashboardLoop:
    @pytest.mark.asyncio
    async def test_caches_latest_overview(self, session_factory, add_profile, add_mission):
        from src.services.views import AdminView
        from src.workers import dashboard

        await add_profile("cust-1")
        await add_mission("cust-1")

        with patch.object(dashboard, "async_session_factory", session_factory):
            assert dashboard.cached_overview() is None
            await dashboard.start_dashboard_loop()
            try:
                for _ in range(100):
                    if dashboard.cached_overview() is not None:
                        break
                    await asyncio.sleep(0.01)
                overview = dashboard.cached_overview()
                assert isinstance(overview, AdminView)
                assert len(overview.missions) == 1
            finally:
                await dashboard.stop_dashboard_loop()

        assert dashboard.cached_overview() is None
