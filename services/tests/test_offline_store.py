"""
Booth offline store tests

Tests:
  1. Pending orders list oldest first
  2. Syncing removes the pending record by its temporary ID
  3. Retry bookkeeping is persisted
  4. Synced orders expire after the retention window
"""
from datetime import datetime, timezone

import pytest

from booth_client.models import Order, OrderStatus
from conftest import make_request


def _server_order(order_id: str, request) -> Order:
    return Order(
        id=order_id,
        customer_name=request.customer_name,
        items=request.items,
        status=OrderStatus.PENDING_PAYMENT,
        date_key=1401,
        created_at=datetime.now(timezone.utc),
    )


@pytest.mark.asyncio
async def test_pending_orders_are_listed_oldest_first(store):
    await store.save_pending(make_request("Second"), temp_id="TEMP-2-bbbbbb", created_at=200.0)
    await store.save_pending(make_request("First"), temp_id="TEMP-1-aaaaaa", created_at=100.0)
    await store.save_pending(make_request("Third"), temp_id="TEMP-3-cccccc", created_at=300.0)

    pending = await store.list_pending()
    assert [p.order_data.customer_name for p in pending] == ["First", "Second", "Third"]
    assert await store.count_pending() == 3


@pytest.mark.asyncio
async def test_saved_order_keeps_its_items(store):
    saved = await store.save_pending(make_request("สมชาย"))
    assert saved.id.startswith("TEMP-")

    loaded = await store.get_pending(saved.id)
    assert loaded.order_data.customer_name == "สมชาย"
    assert loaded.order_data.total_amount == 115.0
    assert loaded.retry_count == 0


@pytest.mark.asyncio
async def test_mark_synced_removes_pending_by_temp_id(store):
    request = make_request()
    pending = await store.save_pending(request, temp_id="TEMP-1-aaaaaa")

    synced = await store.mark_synced(pending.id, _server_order("1401001", request))

    assert synced.id == "1401001"
    assert await store.get_pending("TEMP-1-aaaaaa") is None
    assert await store.has_pending() is False
    assert (await store.get_synced("1401001")).order.customer_name == "Somchai"


@pytest.mark.asyncio
async def test_update_pending_records_failures(store):
    pending = await store.save_pending(make_request())
    await store.update_pending(pending.model_copy(update={"retry_count": 2, "last_error": "timed out"}))

    loaded = await store.get_pending(pending.id)
    assert loaded.retry_count == 2
    assert loaded.last_error == "timed out"


@pytest.mark.asyncio
async def test_cleanup_drops_only_expired_synced_orders(store):
    request = make_request()
    await store.mark_synced("TEMP-1-aaaaaa", _server_order("1401001", request), synced_at=1000.0)
    await store.mark_synced("TEMP-2-bbbbbb", _server_order("1401002", request), synced_at=4000.0)

    removed = await store.cleanup_synced(now=1000.0 + 3601)

    assert removed == 1
    assert await store.get_synced("1401001") is None
    assert await store.get_synced("1401002") is not None
