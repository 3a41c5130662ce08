"""
Order Service — Celery application

Redis is both broker and result backend. Beat drives the payment-timeout
sweep; the worker runs it in a separate container.
"""
from celery import Celery
from order_service.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "order_service",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["order_service.tasks.expiry_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    beat_schedule={
        "expire-unpaid-orders": {
            "task": "expire_unpaid_orders",
            "schedule": float(settings.EXPIRY_CHECK_INTERVAL_SECONDS),
        },
    },
)
