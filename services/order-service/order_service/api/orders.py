"""
Order Service — Public Orders API

Customers (kiosk) and the staff POS create orders here and poll their
status and the pickup queue.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from order_service.core.lifecycle import OrderStatus
from order_service.db.database import get_db
from order_service.db.order_ops import (
    DailyCapacityExceeded,
    OrderNotFound,
    OrderValidationError,
    create_order,
    get_order,
    list_orders,
)
from order_service.schemas.order import OrderCreateRequest, OrderResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["orders"])


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create(payload: OrderCreateRequest, request: Request, response: Response,
                 db: AsyncSession = Depends(get_db)):
    """
    Create an order in PENDING_PAYMENT. The server assigns the DDMMXXX ID
    and recomputes the total. Safe to retry with the same Idempotency-Key.
    """
    idem_key = request.headers.get("Idempotency-Key")
    try:
        order, created = await create_order(db, payload, client_ref=idem_key)
    except OrderValidationError as exc:
        logger.warning("Order rejected for %s: %s", payload.customer_name, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"validation failed: {exc}")
    except DailyCapacityExceeded as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    if not created:
        response.headers["X-Idempotency-Replay"] = "true"
    return OrderResponse.model_validate(order)


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_status(order_id: str, db: AsyncSession = Depends(get_db)):
    try:
        order = await get_order(db, order_id)
    except OrderNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return OrderResponse.model_validate(order)


@router.get("/queue", response_model=list[OrderResponse])
async def get_queue(db: AsyncSession = Depends(get_db)):
    """All PAID orders, ascending by queue number."""
    orders = await list_orders(db, OrderStatus.PAID)
    return [OrderResponse.model_validate(o) for o in orders]
