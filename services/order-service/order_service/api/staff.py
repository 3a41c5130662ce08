"""
Order Service — Staff order management

Every mutation returns the updated order. Repeating a request whose effect
already happened returns the order unchanged; a move the lifecycle does not
allow is a 409.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from order_service.core.lifecycle import InvalidTransition, OrderStatus
from order_service.db.database import get_db
from order_service.db import order_ops
from order_service.schemas.order import MarkPaidRequest, OrderResponse

router = APIRouter(prefix="/staff/orders", tags=["staff"])


async def _run(operation, db: AsyncSession, order_id: str, *args) -> OrderResponse:
    try:
        order = await operation(db, order_id, *args)
    except order_ops.OrderNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except InvalidTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return OrderResponse.model_validate(order)


@router.get("/pending", response_model=list[OrderResponse])
async def pending_payment(db: AsyncSession = Depends(get_db)):
    orders = await order_ops.list_orders(db, OrderStatus.PENDING_PAYMENT)
    return [OrderResponse.model_validate(o) for o in orders]


@router.get("/completed", response_model=list[OrderResponse])
async def completed(db: AsyncSession = Depends(get_db)):
    orders = await order_ops.list_orders(db, OrderStatus.COMPLETED)
    return [OrderResponse.model_validate(o) for o in orders]


@router.put("/{order_id}/verify", response_model=OrderResponse)
async def verify_payment(order_id: str, payload: MarkPaidRequest | None = None,
                         db: AsyncSession = Depends(get_db)):
    """Mark paid and assign the next queue number of the order's day."""
    payment_method = payload.payment_method if payload else None
    return await _run(order_ops.mark_paid, db, order_id, payment_method)


@router.put("/{order_id}/ready", response_model=OrderResponse)
async def mark_ready(order_id: str, db: AsyncSession = Depends(get_db)):
    return await _run(order_ops.mark_ready, db, order_id)


@router.put("/{order_id}/complete", response_model=OrderResponse)
async def complete(order_id: str, db: AsyncSession = Depends(get_db)):
    return await _run(order_ops.complete_order, db, order_id)


@router.delete("/{order_id}", response_model=OrderResponse)
async def cancel(order_id: str, db: AsyncSession = Depends(get_db)):
    return await _run(order_ops.cancel_order, db, order_id)
