"""
Order Service — Order DB models

[TRANSACTIONAL DATA] — orders, their items and the per-day counters.
"""
from datetime import datetime
from sqlalchemy import String, Integer, Float, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from order_service.core.lifecycle import OrderStatus, PaymentMethod
from order_service.db.database import Base


class Order(Base):
    """
    Tracks an order through the lifecycle. total_amount is derived from the
    items and is not a column.
    """
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(7), primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status"), default=OrderStatus.PENDING_PAYMENT, nullable=False, index=True
    )
    date_key: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    queue_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    payment_method: Mapped[PaymentMethod | None] = mapped_column(
        Enum(PaymentMethod, name="payment_method"), nullable=True
    )
    # Idempotency-Key supplied by the client at creation time
    client_ref: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order", lazy="selectin", order_by="OrderItem.id", cascade="all, delete-orphan"
    )

    @property
    def total_amount(self) -> float:
        return sum(item.price * item.quantity for item in self.items)


class OrderItem(Base):
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)
    menu_item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")


class DailyCounter(Base):
    """
    One row per operating day. version_id is the optimistic locking column,
    incremented on every allocation.
    """
    __tablename__ = "daily_counters"

    date_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    last_sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_queue_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
