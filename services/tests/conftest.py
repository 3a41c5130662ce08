"""
Shared fixtures.

The order service reads its settings at import time, so the environment is
pointed at a throwaway SQLite file before anything under order_service is
imported. Redis is replaced by fakeredis per test.
"""
import asyncio
import os
import tempfile
from datetime import datetime, timezone

_DB_DIR = tempfile.mkdtemp(prefix="order-service-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_DB_DIR}/orders.db")
os.environ.setdefault("METRICS_ENABLED", "false")
os.environ.setdefault("STAFF_PASSWORD", "staff-pass")
os.environ.setdefault("ADMIN_PASSWORD", "admin-pass")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("OPT_LOCK_MAX_RETRIES", "50")
os.environ.setdefault("OPT_LOCK_BASE_DELAY_MS", "5")
os.environ.setdefault("OPT_LOCK_MAX_DELAY_MS", "50")

from fakeredis import aioredis as fake_aioredis
import httpx
import pytest
import pytest_asyncio

from order_service.core import redis_client
from order_service.db.database import AsyncSessionLocal, Base, engine
from order_service.main import app
from order_service.models.menu import MenuItem

from booth_client.errors import TransientApiError
from booth_client.models import Order, OrderItem, OrderRequest, OrderStatus
from booth_client.offline_store import OfflineStore

# ─── Menu ──────────────────────────────────────────────────────────────────────
MENU = [
    {"name": "Pad Thai", "price": 50.0, "category": "main"},
    {"name": "Thai Tea", "price": 15.0, "category": "drink"},
    {"name": "Mango Sticky Rice", "price": 60.0, "category": "dessert"},
    {"name": "Sold Out Special", "price": 80.0, "category": "main", "available": False},
]


# ─── Fixtures ──────────────────────────────────────────────────────────────────
@pytest_asyncio.fixture
async def db_setup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as session:
        session.add_all(MenuItem(**item) for item in MENU)
        await session.commit()
    yield
    await engine.dispose()


@pytest.fixture
def fake_redis():
    client = fake_aioredis.FakeRedis(decode_responses=True)
    redis_client.set_redis(client)
    yield client
    redis_client.set_redis(None)


@pytest_asyncio.fixture
async def client(db_setup, fake_redis):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def menu(client):
    r = await client.get("/menu")
    return {item["name"]: item for item in r.json()}


async def _token(client: httpx.AsyncClient, role: str, password: str) -> dict[str, str]:
    r = await client.post("/auth/login", json={"role": role, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest_asyncio.fixture
async def staff_headers(client):
    return await _token(client, "staff", "staff-pass")


@pytest_asyncio.fixture
async def admin_headers(client):
    return await _token(client, "admin", "admin-pass")


def order_payload(menu: dict, name: str = "Somchai", lines: list[tuple[str, int]] | None = None,
                  date_key: int | None = 1401) -> dict:
    lines = lines or [("Pad Thai", 2), ("Thai Tea", 1)]
    payload = {
        "customer_name": name,
        "items": [
            {
                "menu_item_id": menu[item]["id"],
                "name": item,
                "price": menu[item]["price"],
                "quantity": qty,
            }
            for item, qty in lines
        ],
    }
    if date_key is not None:
        payload["date_key"] = date_key
    return payload


# ─── Booth client fakes ────────────────────────────────────────────────────────

class FakeOrderApi:
    """
    In-memory stand-in for BoothApiClient.create_order that honours
    Idempotency-Key the way the order service does.
    """

    def __init__(self):
        self.calls: list[str | None] = []
        self.requests: list[OrderRequest] = []
        self.orders: dict[str, Order] = {}
        self.fail_with: Exception | None = None
        self.fail_keys: set[str] = set()
        self.lose_response_once = False
        self.gate: asyncio.Event | None = None
        self._sequence = 0

    async def create_order(self, request: OrderRequest, idempotency_key: str | None = None) -> Order:
        self.calls.append(idempotency_key)
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        if idempotency_key in self.fail_keys:
            raise TransientApiError("POST /orders returned 503: unavailable")

        if idempotency_key in self.orders:
            return self.orders[idempotency_key]
        self._sequence += 1
        order = Order(
            id=f"1401{self._sequence:03d}",
            customer_name=request.customer_name,
            items=request.items,
            status=OrderStatus.PENDING_PAYMENT,
            date_key=request.date_key or 1401,
            created_at=datetime.now(timezone.utc),
        )
        self.orders[idempotency_key] = order

        if self.lose_response_once:
            self.lose_response_once = False
            raise TransientApiError("POST /orders timed out")
        return order

    async def health(self) -> bool:
        return True

    async def aclose(self) -> None:
        pass


def make_request(name: str = "Somchai", lines: list[tuple[str, float, int]] | None = None) -> OrderRequest:
    lines = lines or [("Pad Thai", 50.0, 2), ("Thai Tea", 15.0, 1)]
    return OrderRequest(
        customer_name=name,
        items=[
            OrderItem(menu_item_id=idx + 1, name=item, price=price, quantity=qty)
            for idx, (item, price, qty) in enumerate(lines)
        ],
    )


@pytest.fixture
def fake_api():
    return FakeOrderApi()


@pytest_asyncio.fixture
async def store(tmp_path):
    s = OfflineStore(database_url=f"sqlite+aiosqlite:///{tmp_path}/booth.db", retention_seconds=3600)
    await s.init()
    yield s
    await s.close()
