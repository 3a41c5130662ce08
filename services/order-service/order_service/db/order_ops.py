"""
Order Service — Order lifecycle operations

All status changes go through plan_transition() and a conditional UPDATE
keyed on the status the order was read in, so a racing duplicate request
can never apply the same transition twice.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from order_service.core.config import get_settings
from order_service.core.lifecycle import (
    InvalidTransition,
    OrderStatus,
    PaymentMethod,
    plan_transition,
)
from order_service.core.optimistic_lock import StaleDataError, with_optimistic_retry
from order_service.core.order_id import current_date_key, order_id_for_date_key
from order_service.models.menu import MenuItem
from order_service.models.order import DailyCounter, Order, OrderItem
from order_service.schemas.order import OrderCreateRequest

settings = get_settings()
logger = logging.getLogger(__name__)

REVENUE_STATUSES = (OrderStatus.PAID, OrderStatus.READY, OrderStatus.COMPLETED)


class OrderNotFound(Exception):
    pass


class OrderValidationError(Exception):
    pass


class DailyCapacityExceeded(Exception):
    pass


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── Daily counters ────────────────────────────────────────────────────────────

async def _bump_counter(db: AsyncSession, date_key: int, field: str) -> int:
    """
    Increment one counter column of the day's row using optimistic locking:
      - READ:  current value + version_id
      - WRITE: UPDATE ... WHERE version_id = <read_version>
      - zero rows updated → another request won the race → StaleDataError
    """
    column = getattr(DailyCounter, field)
    row = (await db.execute(
        select(column, DailyCounter.version_id).where(DailyCounter.date_key == date_key)
    )).one_or_none()

    if row is None:
        db.add(DailyCounter(date_key=date_key, last_sequence=0, last_queue_number=0, version_id=1))
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise StaleDataError(f"Counter row for {date_key} created concurrently.")
        current_value, current_version = 0, 1
    else:
        current_value, current_version = row

    new_value = current_value + 1
    result = await db.execute(
        update(DailyCounter)
        .where(DailyCounter.date_key == date_key, DailyCounter.version_id == current_version)
        .values({field: new_value, "version_id": current_version + 1})
    )
    if result.rowcount == 0:
        await db.rollback()
        raise StaleDataError(f"Counter {field} for {date_key} changed concurrently.")
    await db.commit()
    return new_value


@with_optimistic_retry()
async def allocate_sequence(db: AsyncSession, date_key: int) -> int:
    return await _bump_counter(db, date_key, "last_sequence")


@with_optimistic_retry()
async def allocate_queue_number(db: AsyncSession, date_key: int) -> int:
    return await _bump_counter(db, date_key, "last_queue_number")


# ── Reads ─────────────────────────────────────────────────────────────────────

async def _load(db: AsyncSession, order_id: str) -> Order | None:
    result = await db.execute(
        select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_order(db: AsyncSession, order_id: str) -> Order:
    order = await _load(db, order_id)
    if order is None:
        raise OrderNotFound(f"Order '{order_id}' not found.")
    return order


async def list_orders(db: AsyncSession, status: OrderStatus) -> list[Order]:
    query = select(Order).where(Order.status == status)
    if status == OrderStatus.PAID:
        query = query.order_by(Order.queue_number.asc())
    else:
        query = query.order_by(Order.created_at.asc())
    result = await db.execute(query)
    return list(result.scalars().all())


# ── Creation ──────────────────────────────────────────────────────────────────

async def _verify_items(db: AsyncSession, payload: OrderCreateRequest) -> None:
    """Prices and availability come from the menu, not the client."""
    for idx, item in enumerate(payload.items):
        menu_item = await db.get(MenuItem, item.menu_item_id)
        if menu_item is None:
            raise OrderValidationError(f"item {idx}: menu item not found")
        if not menu_item.available:
            raise OrderValidationError(f"item {idx}: menu item not available")
        if abs(menu_item.price - item.price) > 1e-9:
            raise OrderValidationError(f"item {idx}: price mismatch")


async def _find_by_client_ref(db: AsyncSession, client_ref: str) -> Order | None:
    result = await db.execute(
        select(Order).where(Order.client_ref == client_ref).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_order(
    db: AsyncSession,
    payload: OrderCreateRequest,
    client_ref: str | None = None,
) -> tuple[Order, bool]:
    """
    Create an order in PENDING_PAYMENT with the next sequential ID of its day.
    Returns (order, created). A repeated client_ref returns the existing order
    with created=False.
    """
    if client_ref:
        existing = await _find_by_client_ref(db, client_ref)
        if existing is not None:
            logger.info("Order %s replayed for client_ref %s", existing.id, client_ref)
            return existing, False

    await _verify_items(db, payload)

    date_key = payload.date_key or current_date_key()
    sequence = await allocate_sequence(db, date_key)
    if sequence > settings.MAX_ORDERS_PER_DAY:
        raise DailyCapacityExceeded(f"Daily order capacity reached for date key {date_key}.")

    order = Order(
        id=order_id_for_date_key(date_key, sequence),
        customer_name=payload.customer_name,
        status=OrderStatus.PENDING_PAYMENT,
        date_key=date_key,
        client_ref=client_ref,
        created_at=_utc_now(),
        items=[
            OrderItem(
                menu_item_id=item.menu_item_id,
                name=item.name,
                price=item.price,
                quantity=item.quantity,
            )
            for item in payload.items
        ],
    )
    db.add(order)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if client_ref:
            existing = await _find_by_client_ref(db, client_ref)
            if existing is not None:
                return existing, False
        raise

    logger.info(
        "Order %s created for %s: total=%.2f date_key=%d",
        order.id, order.customer_name, order.total_amount, date_key,
    )
    return order, True


# ── Transitions ───────────────────────────────────────────────────────────────

async def _apply_transition(
    db: AsyncSession,
    order_id: str,
    from_status: OrderStatus,
    target: OrderStatus,
    **values,
) -> Order:
    result = await db.execute(
        update(Order)
        .where(Order.id == order_id, Order.status == from_status)
        .values(status=target, **values)
    )
    if result.rowcount == 0:
        # Another request moved the order first
        await db.rollback()
        current = await get_order(db, order_id)
        if current.status == target:
            return current
        raise InvalidTransition(current.status, target)

    await db.commit()
    logger.info("Order %s: %s → %s", order_id, from_status.value, target.value)
    return await get_order(db, order_id)


async def _transition(db: AsyncSession, order_id: str, target: OrderStatus, **values) -> Order:
    order = await get_order(db, order_id)
    if not plan_transition(order.status, target):
        return order
    return await _apply_transition(db, order_id, order.status, target, **values)


async def mark_paid(
    db: AsyncSession,
    order_id: str,
    payment_method: PaymentMethod | None = None,
) -> Order:
    """PENDING_PAYMENT → PAID; the only place a queue number is assigned."""
    order = await get_order(db, order_id)
    if not plan_transition(order.status, OrderStatus.PAID):
        return order

    from_status, date_key = order.status, order.date_key
    queue_number = await allocate_queue_number(db, date_key)
    return await _apply_transition(
        db,
        order_id,
        from_status,
        OrderStatus.PAID,
        queue_number=queue_number,
        paid_at=_utc_now(),
        payment_method=payment_method,
    )


async def mark_ready(db: AsyncSession, order_id: str) -> Order:
    return await _transition(db, order_id, OrderStatus.READY)


async def complete_order(db: AsyncSession, order_id: str) -> Order:
    return await _transition(db, order_id, OrderStatus.COMPLETED, completed_at=_utc_now())


async def cancel_order(db: AsyncSession, order_id: str) -> Order:
    return await _transition(db, order_id, OrderStatus.CANCELLED)


def expire_unpaid_orders(session: Session, cutoff: datetime) -> int:
    """Cancel every PENDING_PAYMENT order created before cutoff. Returns the count."""
    result = session.execute(
        update(Order)
        .where(Order.status == OrderStatus.PENDING_PAYMENT, Order.created_at < cutoff)
        .values(status=OrderStatus.CANCELLED)
    )
    session.commit()
    return result.rowcount


# ── Stats ─────────────────────────────────────────────────────────────────────

async def sales_summary(db: AsyncSession, date_key: int, limit: int = 10) -> dict:
    status_rows = await db.execute(
        select(Order.status, func.count(Order.id))
        .where(Order.date_key == date_key)
        .group_by(Order.status)
    )
    orders_by_status = {status.value: 0 for status in OrderStatus}
    for status, count in status_rows.all():
        orders_by_status[OrderStatus(status).value] = count

    quantity = func.sum(OrderItem.quantity)
    revenue = func.sum(OrderItem.price * OrderItem.quantity)
    item_rows = await db.execute(
        select(OrderItem.menu_item_id, OrderItem.name, quantity, revenue)
        .join(Order, Order.id == OrderItem.order_id)
        .where(Order.date_key == date_key, Order.status.in_(REVENUE_STATUSES))
        .group_by(OrderItem.menu_item_id, OrderItem.name)
        .order_by(quantity.desc())
    )
    items = [
        {"menu_item_id": mid, "name": name, "quantity": int(qty or 0), "revenue": float(rev or 0)}
        for mid, name, qty, rev in item_rows.all()
    ]

    return {
        "date_key": date_key,
        "orders_by_status": orders_by_status,
        "total_revenue": sum(i["revenue"] for i in items),
        "popular_items": items[:limit],
    }
