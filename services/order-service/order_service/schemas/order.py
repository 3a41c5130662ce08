"""
Order Service — Pydantic Schemas
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from order_service.core.config import get_settings
from order_service.core.lifecycle import OrderStatus, PaymentMethod
from order_service.core.order_id import is_valid_date_key

settings = get_settings()


class OrderItemRequest(BaseModel):
    menu_item_id: int = Field(..., examples=[1])
    name: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., gt=0)
    quantity: int = Field(..., ge=1)

    @field_validator("quantity")
    @classmethod
    def _quantity_within_limit(cls, value: int) -> int:
        if value > settings.MAX_ITEM_QUANTITY:
            raise ValueError(f"quantity must be 1-{settings.MAX_ITEM_QUANTITY}")
        return value


class OrderCreateRequest(BaseModel):
    customer_name: str
    items: list[OrderItemRequest] = Field(..., min_length=1, max_length=50)
    date_key: int | None = Field(None, examples=[1401])

    @field_validator("customer_name")
    @classmethod
    def _trimmed_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("customer name must be at least 2 characters")
        if len(value) > 50:
            raise ValueError("customer name must be at most 50 characters")
        return value

    @field_validator("date_key")
    @classmethod
    def _ddmm(cls, value: int | None) -> int | None:
        if value is not None and not is_valid_date_key(value):
            raise ValueError("date_key must be in DDMM format (101-3112)")
        return value


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    menu_item_id: int
    name: str
    price: float
    quantity: int


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_name: str
    items: list[OrderItemResponse]
    status: OrderStatus
    date_key: int
    queue_number: int | None = None
    payment_method: PaymentMethod | None = None
    created_at: datetime
    paid_at: datetime | None = None
    completed_at: datetime | None = None

    @computed_field
    @property
    def total_amount(self) -> float:
        return sum(item.price * item.quantity for item in self.items)


class MarkPaidRequest(BaseModel):
    payment_method: PaymentMethod | None = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    dependencies: dict[str, str]
