"""
Booth Client — Customer order tracker

Polls one order's status and the pickup queue, and keeps the derived
queue position current.
"""
import asyncio

from booth_client.api import BoothApiClient
from booth_client.config import get_settings
from booth_client.errors import OrderNotFoundError
from booth_client.ids import is_temp_id
from booth_client.models import Order, QueuePosition
from booth_client.polling import Poller
from booth_client.queue import queue_position


class OrderTracker:

    def __init__(
        self,
        api: BoothApiClient,
        order_id: str,
        *,
        status_interval: float | None = None,
        queue_interval: float | None = None,
        jitter: float | None = None,
    ):
        if is_temp_id(order_id):
            raise ValueError(f"{order_id} is a local pending order and has no server status yet")

        settings = get_settings()
        jitter = settings.POLL_JITTER_SECONDS if jitter is None else jitter
        self.order_id = order_id
        self.order: Order | None = None
        self.position = QueuePosition(position=0, total=0)
        self.not_found = False

        self._status_poller: Poller[Order] = Poller(
            lambda: api.get_order(order_id),
            status_interval or settings.ORDER_POLL_INTERVAL_SECONDS,
            jitter=jitter,
            on_result=self._on_order,
            on_not_found=self._on_not_found,
            name=f"order-status-{order_id}",
        )
        self._queue_poller: Poller[list[Order]] = Poller(
            api.get_queue,
            queue_interval or settings.QUEUE_POLL_INTERVAL_SECONDS,
            jitter=jitter,
            on_result=self._on_queue,
            name="queue",
        )

    def _on_order(self, order: Order) -> None:
        self.order = order
        self.not_found = False

    def _on_not_found(self, exc: OrderNotFoundError) -> None:
        self.not_found = True

    def _on_queue(self, orders: list[Order]) -> None:
        self.position = queue_position(orders, self.order_id)

    async def refresh(self) -> None:
        await asyncio.gather(self._status_poller.poll_once(), self._queue_poller.poll_once())

    def start(self) -> None:
        self._status_poller.start()
        self._queue_poller.start()

    async def stop(self) -> None:
        await self._status_poller.stop()
        await self._queue_poller.stop()

    async def __aenter__(self) -> "OrderTracker":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
