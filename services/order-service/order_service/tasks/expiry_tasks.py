"""
Order Service — Celery tasks (payment timeout)

Beat schedules expire_unpaid_orders; orders left in PENDING_PAYMENT longer
than ORDER_EXPIRY_MINUTES are cancelled.
"""
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from order_service.core.celery_app import celery_app
from order_service.core.config import get_settings
from order_service.db.order_ops import expire_unpaid_orders as _expire_unpaid_orders

settings = get_settings()
logger = logging.getLogger(__name__)


@lru_cache()
def get_sync_engine() -> Engine:
    # Sync engine for Celery (Celery tasks are not async-native)
    return create_engine(settings.sync_database_url, pool_pre_ping=True)


def run_expiry(engine: Engine, now: datetime | None = None) -> int:
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(minutes=settings.ORDER_EXPIRY_MINUTES)
    with Session(engine) as session:
        count = _expire_unpaid_orders(session, cutoff)
    if count:
        logger.info(
            "Expired %d unpaid order(s) older than %d minutes (cutoff %s)",
            count, settings.ORDER_EXPIRY_MINUTES, cutoff.isoformat(),
        )
    return count


@celery_app.task(
    name="expire_unpaid_orders",
    bind=True,
    max_retries=3,
    default_retry_delay=10,
    acks_late=True,
)
def expire_unpaid_orders(self) -> int:
    try:
        return run_expiry(get_sync_engine())
    except Exception as exc:
        logger.exception("Failed to expire unpaid orders")
        raise self.retry(exc=exc)
