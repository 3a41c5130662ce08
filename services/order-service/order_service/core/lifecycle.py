"""
Order Service — Order lifecycle state machine

    PENDING_PAYMENT → PAID → (READY) → COMPLETED
    PENDING_PAYMENT → CANCELLED

COMPLETED and CANCELLED are terminal. Asking for the state an order is
already in is a no-op; any other move outside ALLOWED_TRANSITIONS is
rejected.
"""
from enum import Enum


class OrderStatus(str, Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAID = "PAID"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    PROMPTPAY = "PROMPTPAY"
    CASH = "CASH"


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING_PAYMENT: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.READY, OrderStatus.COMPLETED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class InvalidTransition(Exception):
    def __init__(self, current: OrderStatus, target: OrderStatus):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move order from {current.value} to {target.value}.")


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def plan_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """
    Decide whether moving current → target must be applied.

    Returns False when the order is already in the target state (idempotent
    retry), True when the move is allowed. Raises InvalidTransition otherwise.
    """
    if current == target:
        return False
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(current, target)
    return True
