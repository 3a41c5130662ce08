"""
Booth Client — Client-side order validation

Runs before any network call; failures block submission.
"""
from booth_client.errors import OrderValidationError
from booth_client.models import OrderItem, OrderRequest

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50


def validate_customer_name(name: str) -> str:
    """Return the trimmed name or raise. Length counts characters, not bytes."""
    trimmed = name.strip()
    if not trimmed:
        raise OrderValidationError("name is required")
    if len(trimmed) < MIN_NAME_LENGTH:
        raise OrderValidationError("name too short")
    if len(trimmed) > MAX_NAME_LENGTH:
        raise OrderValidationError("name too long")
    return trimmed


def validate_items(items: list[OrderItem], max_quantity: int) -> None:
    if not items:
        raise OrderValidationError("cart is empty")
    for item in items:
        if item.quantity < 1:
            raise OrderValidationError(f"{item.name}: quantity must be at least 1")
        if item.quantity > max_quantity:
            raise OrderValidationError(f"{item.name}: quantity must be at most {max_quantity}")


def validate_order_request(request: OrderRequest, max_quantity: int) -> OrderRequest:
    """Validate and return a copy with the customer name trimmed."""
    name = validate_customer_name(request.customer_name)
    validate_items(request.items, max_quantity)
    return request.model_copy(update={"customer_name": name})
