"""
Booth Client — Local offline store

Two tables in an on-device SQLite file:
  pending_orders  order requests not yet acknowledged by the server,
                  keyed by temporary ID, replayed oldest first (created_at)
  synced_orders   server-confirmed orders keyed by their real ID, kept for
                  SYNCED_RETENTION_SECONDS to show post-reconnect confirmations
"""
import logging
import time
from pathlib import Path

from sqlalchemy import JSON, Float, Integer, String, Text, delete, func, select
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from booth_client.config import get_settings
from booth_client.ids import generate_temp_id
from booth_client.models import Order, OrderRequest, PendingOrder, SyncedOrder

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class PendingOrderRecord(Base):
    __tablename__ = "pending_orders"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    order_data: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[float] = mapped_column(Float, index=True, nullable=False)
    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_model(self) -> PendingOrder:
        return PendingOrder(
            id=self.id,
            order_data=OrderRequest.model_validate(self.order_data),
            created_at=self.created_at,
            retry_count=self.retry_count,
            last_error=self.last_error,
        )


class SyncedOrderRecord(Base):
    __tablename__ = "synced_orders"

    id: Mapped[str] = mapped_column(String(16), primary_key=True)
    order: Mapped[dict] = mapped_column(JSON, nullable=False)
    synced_at: Mapped[float] = mapped_column(Float, index=True, nullable=False)

    def to_model(self) -> SyncedOrder:
        return SyncedOrder(id=self.id, order=Order.model_validate(self.order), synced_at=self.synced_at)


def _sqlite_file(database_url: str) -> Path | None:
    if not database_url.startswith("sqlite") or ":memory:" in database_url:
        return None
    return Path(database_url.split(":///", 1)[1])


class OfflineStore:

    def __init__(self, database_url: str | None = None, retention_seconds: int | None = None):
        settings = get_settings()
        self.database_url = database_url or settings.offline_database_url
        self.retention_seconds = (
            retention_seconds if retention_seconds is not None else settings.SYNCED_RETENTION_SECONDS
        )
        self._engine: AsyncEngine = create_async_engine(self.database_url)
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)

    async def init(self) -> None:
        """Create the schema if it does not already exist."""
        db_file = _sqlite_file(self.database_url)
        if db_file is not None:
            db_file.parent.mkdir(parents=True, exist_ok=True)
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self._engine.dispose()

    # ── Pending ───────────────────────────────────────────────────────────────

    async def save_pending(
        self,
        order_data: OrderRequest,
        temp_id: str | None = None,
        created_at: float | None = None,
    ) -> PendingOrder:
        record = PendingOrderRecord(
            id=temp_id or generate_temp_id(),
            order_data=order_data.to_payload(),
            created_at=created_at if created_at is not None else time.time(),
            retry_count=0,
        )
        async with self._sessions() as session, session.begin():
            session.add(record)
        logger.info("Order for %s stored offline as %s", order_data.customer_name, record.id)
        return record.to_model()

    async def list_pending(self) -> list[PendingOrder]:
        """All pending orders, oldest first."""
        async with self._sessions() as session:
            result = await session.execute(
                select(PendingOrderRecord).order_by(PendingOrderRecord.created_at, PendingOrderRecord.id)
            )
            return [record.to_model() for record in result.scalars().all()]

    async def get_pending(self, temp_id: str) -> PendingOrder | None:
        async with self._sessions() as session:
            record = await session.get(PendingOrderRecord, temp_id)
            return record.to_model() if record else None

    async def update_pending(self, pending: PendingOrder) -> None:
        async with self._sessions() as session, session.begin():
            record = await session.get(PendingOrderRecord, pending.id)
            if record is None:
                return
            record.retry_count = pending.retry_count
            record.last_error = pending.last_error

    async def remove_pending(self, temp_id: str) -> None:
        async with self._sessions() as session, session.begin():
            await session.execute(delete(PendingOrderRecord).where(PendingOrderRecord.id == temp_id))

    async def count_pending(self) -> int:
        async with self._sessions() as session:
            result = await session.execute(select(func.count()).select_from(PendingOrderRecord))
            return int(result.scalar_one())

    async def has_pending(self) -> bool:
        return await self.count_pending() > 0

    # ── Synced ────────────────────────────────────────────────────────────────

    async def mark_synced(self, temp_id: str, order: Order, synced_at: float | None = None) -> SyncedOrder:
        """
        Atomically drop the pending record keyed by its temporary ID and
        record the server order under its real ID.
        """
        record = SyncedOrderRecord(
            id=order.id,
            order=order.model_dump(mode="json", exclude={"total_amount"}),
            synced_at=synced_at if synced_at is not None else time.time(),
        )
        async with self._sessions() as session, session.begin():
            await session.execute(delete(PendingOrderRecord).where(PendingOrderRecord.id == temp_id))
            record = await session.merge(record)
        logger.info("Pending order %s synced as %s", temp_id, order.id)
        return record.to_model()

    async def get_synced(self, order_id: str) -> SyncedOrder | None:
        async with self._sessions() as session:
            record = await session.get(SyncedOrderRecord, order_id)
            return record.to_model() if record else None

    async def cleanup_synced(self, now: float | None = None) -> int:
        """Delete synced orders older than the retention window. Returns the count."""
        cutoff = (now if now is not None else time.time()) - self.retention_seconds
        async with self._sessions() as session, session.begin():
            result = await session.execute(
                delete(SyncedOrderRecord).where(SyncedOrderRecord.synced_at < cutoff)
            )
        return result.rowcount
