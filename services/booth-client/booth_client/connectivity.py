"""
Booth Client — Connectivity monitor

Holds the device's belief about being online. The belief is advisory:
callers still handle every network call failing. Reconnect listeners run
exactly once per offline → online transition; repeated "online" signals
and the initial online state do not fire them.
"""
import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

ReconnectListener = Callable[[], Awaitable[None]]
Probe = Callable[[], Awaitable[bool]]


class ConnectivityMonitor:

    def __init__(
        self,
        initially_online: bool = True,
        probe: Probe | None = None,
        probe_interval: float = 15.0,
    ):
        self._online = initially_online
        self._listeners: list[ReconnectListener] = []
        self._running: set[asyncio.Task] = set()
        self._probe = probe
        self._probe_interval = probe_interval
        self._probe_task: asyncio.Task | None = None
        self.reconnect_count = 0

    @property
    def is_online(self) -> bool:
        return self._online

    def on_reconnect(self, listener: ReconnectListener) -> None:
        self._listeners.append(listener)

    def report(self, online: bool) -> bool:
        """Record a connectivity signal. Returns True if it was an offline → online transition."""
        if online == self._online:
            return False
        self._online = online
        if not online:
            logger.warning("Connectivity lost; new orders will be stored offline")
            return False

        self.reconnect_count += 1
        logger.info("Connectivity restored (transition #%d)", self.reconnect_count)
        for listener in self._listeners:
            task = asyncio.create_task(self._notify(listener))
            self._running.add(task)
            task.add_done_callback(self._running.discard)
        return True

    def mark_online(self) -> bool:
        return self.report(True)

    def mark_offline(self) -> bool:
        return self.report(False)

    async def _notify(self, listener: ReconnectListener) -> None:
        try:
            await listener()
        except Exception:
            logger.exception("Reconnect listener %r failed", listener)

    async def wait_idle(self) -> None:
        """Wait for reconnect listeners that are still running."""
        if self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)

    # ── Probing ───────────────────────────────────────────────────────────────

    async def _probe_loop(self) -> None:
        while True:
            try:
                online = await self._probe()
            except Exception as exc:
                logger.warning("Connectivity probe failed: %s", exc)
                online = False
            self.report(online)
            await asyncio.sleep(self._probe_interval)

    def start(self) -> None:
        if self._probe is None or (self._probe_task and not self._probe_task.done()):
            return
        self._probe_task = asyncio.create_task(self._probe_loop(), name="connectivity-probe")

    async def stop(self) -> None:
        if self._probe_task is not None:
            self._probe_task.cancel()
            try:
                await self._probe_task
            except asyncio.CancelledError:
                pass
            self._probe_task = None
        await self.wait_idle()
