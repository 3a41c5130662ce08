"""
Booth Client — Interval poller with jitter

Each fetch gets an increasing request number. A response is applied only
if no newer request has completed already; older ones are dropped.
Transient failures are logged and retried on the next tick. A not-found
answer is reported separately from transient failures.
"""
import asyncio
import logging
import random
from typing import Awaitable, Callable, Generic, TypeVar

from booth_client.errors import ApiError, OrderNotFoundError, TransientApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Poller(Generic[T]):

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        interval: float,
        *,
        jitter: float = 0.0,
        on_result: Callable[[T], None] | None = None,
        on_not_found: Callable[[OrderNotFoundError], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        name: str = "poller",
    ):
        self._fetch = fetch
        self.interval = interval
        self.jitter = jitter
        self._on_result = on_result
        self._on_not_found = on_not_found
        self._on_error = on_error
        self.name = name

        self._issued = 0
        self._applied = 0
        self._task: asyncio.Task | None = None
        self.latest: T | None = None
        self.not_found = False
        self.consecutive_failures = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _next_delay(self) -> float:
        if self.jitter <= 0:
            return self.interval
        return self.interval + random.uniform(0, self.jitter)

    def _is_stale(self, seq: int) -> bool:
        if seq < self._applied:
            logger.debug("%s: dropping response #%d, #%d already applied", self.name, seq, self._applied)
            return True
        return False

    async def poll_once(self) -> T | None:
        self._issued += 1
        seq = self._issued
        try:
            result = await self._fetch()
        except OrderNotFoundError as exc:
            if self._is_stale(seq):
                return None
            self._applied = seq
            self.not_found = True
            if self._on_not_found:
                self._on_not_found(exc)
            return None
        except (TransientApiError, ApiError) as exc:
            self.consecutive_failures += 1
            logger.warning("%s: poll failed (%d in a row): %s", self.name, self.consecutive_failures, exc)
            if self._on_error:
                self._on_error(exc)
            return None

        if self._is_stale(seq):
            return None
        self._applied = seq
        self.latest = result
        self.not_found = False
        self.consecutive_failures = 0
        if self._on_result:
            self._on_result(result)
        return result

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self._next_delay())

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=self.name)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def __aenter__(self) -> "Poller[T]":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
