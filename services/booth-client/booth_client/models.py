"""
Booth Client — Order models as seen by the device
"""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field


class OrderStatus(str, Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAID = "PAID"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    PROMPTPAY = "PROMPTPAY"
    CASH = "CASH"


class MenuItem(BaseModel):
    id: int
    name: str
    price: float
    available: bool = True
    category: str = "main"


class OrderItem(BaseModel):
    menu_item_id: int
    name: str
    price: float
    quantity: int


def calculate_total(items: list[OrderItem]) -> float:
    """Σ price × quantity; 0 for an empty list."""
    return sum(item.price * item.quantity for item in items)


class OrderRequest(BaseModel):
    customer_name: str
    items: list[OrderItem]
    date_key: int | None = None

    @computed_field
    @property
    def total_amount(self) -> float:
        """Provisional display total; the server's figure is authoritative."""
        return calculate_total(self.items)

    def to_payload(self) -> dict:
        return self.model_dump(exclude={"total_amount"}, exclude_none=True)


class Order(BaseModel):
    id: str
    customer_name: str
    items: list[OrderItem]
    status: OrderStatus
    date_key: int | None = None
    queue_number: int | None = None
    payment_method: PaymentMethod | None = None
    created_at: datetime
    paid_at: datetime | None = None
    completed_at: datetime | None = None

    @computed_field
    @property
    def total_amount(self) -> float:
        return calculate_total(self.items)


class PendingOrder(BaseModel):
    """An order request accepted locally but not yet acknowledged by the server."""

    id: str
    order_data: OrderRequest
    created_at: float
    retry_count: int = 0
    last_error: str | None = None


class SyncedOrder(BaseModel):
    id: str
    order: Order
    synced_at: float


class SubmitResult(BaseModel):
    order: Order | None = None
    pending: PendingOrder | None = None

    @property
    def is_offline(self) -> bool:
        return self.pending is not None


class SyncResult(BaseModel):
    synced: list[Order] = Field(default_factory=list)
    failed: list[PendingOrder] = Field(default_factory=list)

    @property
    def error_message(self) -> str | None:
        if not self.failed:
            return None
        return f"{len(self.failed)} order(s) failed to sync"


class QueuePosition(BaseModel):
    position: int
    total: int

    @property
    def is_queued(self) -> bool:
        return self.position > 0
