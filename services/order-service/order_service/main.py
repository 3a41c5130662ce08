"""
Order Service — FastAPI application entrypoint
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from order_service.core.config import get_settings
from order_service.core.redis_client import close_redis
from order_service.db.database import engine, Base
from order_service.middleware.auth import RoleAuthMiddleware
from order_service.middleware.idempotency import IdempotencyMiddleware
from order_service.models import menu as _menu_models  # noqa: F401  registers tables
from order_service.models import order as _order_models  # noqa: F401
from order_service.api import auth, health, menu, orders, staff

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="Booth Order Service",
    description="Order lifecycle, per-day queue numbering and idempotent order intake for a fair booth.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(IdempotencyMiddleware)
app.add_middleware(RoleAuthMiddleware)

if settings.METRICS_ENABLED:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

app.include_router(orders.router)
app.include_router(staff.router)
app.include_router(auth.router)
app.include_router(menu.router)
app.include_router(menu.admin_router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {"service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}
