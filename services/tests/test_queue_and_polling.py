"""
Queue position, polling and tracking tests

Tests:
  1. Position among PAID orders by queue number
  2. Out-of-order poll responses are discarded
  3. Not-found and transient failures are reported separately
  4. OrderTracker combines order status and queue position
"""
import asyncio
from datetime import datetime, timezone

import pytest

from booth_client.errors import OrderNotFoundError, TransientApiError
from booth_client.models import Order, OrderItem, OrderStatus, calculate_total
from booth_client.polling import Poller
from booth_client.queue import queue_position
from booth_client.tracking import OrderTracker


def _order(order_id: str, status: OrderStatus = OrderStatus.PAID, queue_number: int | None = None) -> Order:
    return Order(
        id=order_id,
        customer_name="Guest",
        items=[OrderItem(menu_item_id=1, name="Pad Thai", price=50.0, quantity=1)],
        status=status,
        date_key=1401,
        queue_number=queue_number,
        created_at=datetime.now(timezone.utc),
    )


# ─── Queue position ────────────────────────────────────────────────────────────
def test_position_follows_queue_number_not_list_order():
    orders = [_order("1401001", queue_number=3), _order("1401002", queue_number=1),
              _order("1401003", queue_number=2)]

    assert queue_position(orders, "1401001").position == 3
    assert queue_position(orders, "1401002").position == 1
    assert queue_position(orders, "1401003").position == 2
    assert queue_position(orders, "1401001").total == 3


def test_unqueued_orders_have_position_zero():
    orders = [
        _order("1401001", queue_number=1),
        _order("1401002", status=OrderStatus.PENDING_PAYMENT),
        _order("1401003", status=OrderStatus.COMPLETED, queue_number=2),
    ]

    pending = queue_position(orders, "1401002")
    assert pending.position == 0
    assert not pending.is_queued
    assert pending.total == 1
    assert queue_position(orders, "1401003").position == 0
    assert queue_position([], "1401001").total == 0


def test_totals():
    items = [OrderItem(menu_item_id=1, name="Pad Thai", price=35.0, quantity=2),
             OrderItem(menu_item_id=2, name="Thai Tea", price=45.0, quantity=1)]
    assert calculate_total(items) == 115.0
    assert calculate_total([]) == 0


# ─── Poller ────────────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_stale_response_is_discarded():
    slow_release = asyncio.Event()
    answers = []

    async def fetch():
        n = len(answers) + 1
        answers.append(n)
        if n == 1:
            await slow_release.wait()
        return f"response-{n}"

    applied = []
    poller = Poller(fetch, interval=1.0, on_result=applied.append)

    slow = asyncio.create_task(poller.poll_once())
    await asyncio.sleep(0)
    assert await poller.poll_once() == "response-2"

    slow_release.set()
    assert await slow is None
    assert applied == ["response-2"]
    assert poller.latest == "response-2"


@pytest.mark.asyncio
async def test_not_found_and_transient_failures_are_distinct():
    outcomes = [OrderNotFoundError("Order 1401009 not found", status_code=404),
                TransientApiError("GET /orders/1401009 timed out"),
                "found"]

    async def fetch():
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    missing, errors = [], []
    poller = Poller(fetch, interval=1.0, on_not_found=missing.append, on_error=errors.append)

    assert await poller.poll_once() is None
    assert poller.not_found and len(missing) == 1

    assert await poller.poll_once() is None
    assert poller.consecutive_failures == 1
    assert len(errors) == 1

    assert await poller.poll_once() == "found"
    assert not poller.not_found
    assert poller.consecutive_failures == 0


@pytest.mark.asyncio
async def test_poller_loop_runs_until_stopped():
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        return calls

    async with Poller(fetch, interval=0.01, jitter=0.005) as poller:
        for _ in range(200):
            if calls >= 3:
                break
            await asyncio.sleep(0.01)
        assert poller.running
    assert not poller.running
    assert calls >= 3


# ─── Tracker ───────────────────────────────────────────────────────────────────
class TrackingApi:
    def __init__(self, orders: list[Order]):
        self.orders = {o.id: o for o in orders}

    async def get_order(self, order_id: str) -> Order:
        if order_id not in self.orders:
            raise OrderNotFoundError(f"Order {order_id} not found", status_code=404)
        return self.orders[order_id]

    async def get_queue(self) -> list[Order]:
        return [o for o in self.orders.values() if o.status == OrderStatus.PAID]


@pytest.mark.asyncio
async def test_tracker_reports_status_and_position():
    api = TrackingApi([_order("1401001", queue_number=2), _order("1401002", queue_number=1)])
    tracker = OrderTracker(api, "1401001", jitter=0)

    await tracker.refresh()

    assert tracker.order.status == OrderStatus.PAID
    assert tracker.position.position == 2
    assert tracker.position.total == 2
    assert not tracker.not_found


@pytest.mark.asyncio
async def test_tracker_flags_unknown_order():
    tracker = OrderTracker(TrackingApi([]), "1401404", jitter=0)
    await tracker.refresh()
    assert tracker.not_found
    assert tracker.order is None


def test_tracker_rejects_temporary_ids():
    with pytest.raises(ValueError):
        OrderTracker(TrackingApi([]), "TEMP-1700000000000-abc123")
