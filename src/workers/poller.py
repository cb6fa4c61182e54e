"""
Periodic View Poller
====================

Re-reads one view's slice of the stores every ``interval_seconds``
(default 5 s).  There is no push channel, so observers lag writers by up
to one interval, or longer when the store is slow.

Lifetime
--------
* ``start()`` schedules the loop on the running event loop.
* ``stop()`` cancels the loop *and* any refresh still in flight.  Once
  stopped, a late result is dropped and ``on_update`` is never called, so
  a torn-down view is never written to.

Backpressure
------------
Overlapping ``poll_once`` calls share a single in-flight refresh; at most
one read per poller is outstanding at any time.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ViewPoller(Generic[T]):
    def __init__(
        self,
        name: str,
        refresh: Callable[[], Awaitable[T]],
        interval_seconds: float = 5.0,
        on_update: Optional[Callable[[T], Any]] = None,
    ):
        self.name = name
        self.interval = interval_seconds
        self.latest: Optional[T] = None
        self._refresh = refresh
        self._on_update = on_update
        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None
        self._inflight: asyncio.Task | None = None
        self._stopped = False

    # ── Public API ────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stopped = False
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._loop())
        logger.info("Poller %s started (interval=%ss)", self.name, self.interval)

    async def stop(self) -> None:
        self._stopped = True
        if self._stop_event:
            self._stop_event.set()
        if self._inflight and not self._inflight.done():
            self._inflight.cancel()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Poller %s stopped", self.name)

    async def poll_once(self) -> Optional[T]:
        """Refresh now, joining the in-flight refresh if there is one."""
        if self._stopped:
            return None
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.create_task(self._run_refresh())
        return await asyncio.shield(self._inflight)

    # ── Internals ─────────────────────────────────────────────────────

    async def _run_refresh(self) -> Optional[T]:
        result = await self._refresh()
        if self._stopped:
            return None
        self.latest = result
        if self._on_update is not None:
            outcome = self._on_update(result)
            if inspect.isawaitable(outcome):
                await outcome
        return result

    async def _loop(self) -> None:
        """Periodic loop: refresh then sleep."""
        assert self._stop_event is not None
        while not self._stop_event.is_set():
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Unhandled error in %s poll", self.name)
            # Wait for the interval or until stop is signalled
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                break
            except asyncio.TimeoutError:
                pass  # next cycle
