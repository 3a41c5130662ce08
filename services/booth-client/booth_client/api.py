"""
Booth Client — Order Service HTTP client

Every call is a bounded-timeout await on one shared httpx.AsyncClient.
Transport failures, 5xx answers, redirects and 2xx bodies that are not the
expected JSON (captive portals) raise TransientApiError; 4xx answers raise
ApiError subclasses carrying the server's detail message.
"""
import logging
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from booth_client.config import get_settings
from booth_client.errors import (
    ApiError,
    AuthenticationError,
    InvalidTransitionError,
    OrderNotFoundError,
    TransientApiError,
)
from booth_client.models import MenuItem, Order, OrderRequest, PaymentMethod

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass
class AuthContext:
    """
    Credentials for one staff/admin session. Held by the caller's session
    scope and passed explicitly to every role-gated call.
    """

    role: str
    password: str
    token: str | None = None

    @property
    def headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)


def _parse(model: type[M], data: Any) -> M:
    """A 2xx body that is not the expected shape came from something other than the order service."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise TransientApiError(f"unexpected response body for {model.__name__}: {exc.error_count()} error(s)") from exc


def _parse_list(model: type[M], data: Any) -> list[M]:
    if not isinstance(data, list):
        raise TransientApiError(f"expected a list of {model.__name__}, got {type(data).__name__}")
    return [_parse(model, item) for item in data]


class BoothApiClient:

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "BoothApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        auth: AuthContext | None = None,
        not_found: str | None = None,
        **kwargs: Any,
    ) -> Any:
        headers = dict(kwargs.pop("headers", {}) or {})
        if auth is not None:
            headers.update(auth.headers)
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransientApiError(f"{method} {path} timed out") from exc
        except httpx.RequestError as exc:
            raise TransientApiError(f"{method} {path} failed: {exc}") from exc

        if response.status_code >= 500:
            raise TransientApiError(f"{method} {path} returned {response.status_code}: {_detail(response)}")
        if response.status_code == 404 and not_found:
            raise OrderNotFoundError(not_found, status_code=404)
        if response.status_code in (401, 403):
            raise AuthenticationError(_detail(response), status_code=response.status_code)
        if response.status_code == 409:
            raise InvalidTransitionError(_detail(response), status_code=409)
        if response.is_error:
            raise ApiError(_detail(response), status_code=response.status_code)

        if 300 <= response.status_code < 400:
            raise TransientApiError(f"{method} {path} was redirected ({response.status_code})")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            # e.g. a captive portal answering 200 with its login page
            raise TransientApiError(f"{method} {path} returned a non-JSON body") from exc

    # ── Menu ──────────────────────────────────────────────────────────────────

    async def get_available_menu(self) -> list[MenuItem]:
        data = await self._request("GET", "/menu", params={"available": "true"})
        return _parse_list(MenuItem, data)

    # ── Orders ────────────────────────────────────────────────────────────────

    async def create_order(self, request: OrderRequest, idempotency_key: str | None = None) -> Order:
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else {}
        data = await self._request("POST", "/orders", json=request.to_payload(), headers=headers)
        return _parse(Order, data)

    async def get_order(self, order_id: str) -> Order:
        data = await self._request("GET", f"/orders/{order_id}", not_found=f"Order {order_id} not found")
        return _parse(Order, data)

    async def get_queue(self) -> list[Order]:
        data = await self._request("GET", "/queue")
        return _parse_list(Order, data)

    # ── Auth ──────────────────────────────────────────────────────────────────

    async def login(self, auth: AuthContext) -> AuthContext:
        data = await self._request("POST", "/auth/login", json={"role": auth.role, "password": auth.password})
        if not isinstance(data, dict) or "access_token" not in data:
            raise TransientApiError("POST /auth/login returned no access token")
        auth.token = data["access_token"]
        return auth

    async def test_auth(self, auth: AuthContext) -> bool:
        """True when the password is accepted for the role; the token is kept on auth."""
        try:
            await self.login(auth)
        except AuthenticationError:
            return False
        except ApiError as exc:
            logger.warning("Login for %s rejected: %s", auth.role, exc)
            return False
        return True

    # ── Staff ─────────────────────────────────────────────────────────────────

    async def get_pending_orders(self, auth: AuthContext) -> list[Order]:
        data = await self._request("GET", "/staff/orders/pending", auth=auth)
        return _parse_list(Order, data)

    async def get_completed_orders(self, auth: AuthContext) -> list[Order]:
        data = await self._request("GET", "/staff/orders/completed", auth=auth)
        return _parse_list(Order, data)

    async def mark_paid(
        self,
        order_id: str,
        auth: AuthContext | None = None,
        payment_method: PaymentMethod | None = None,
    ) -> Order:
        body = {"payment_method": payment_method.value} if payment_method else None
        data = await self._request(
            "PUT", f"/staff/orders/{order_id}/verify", auth=auth, json=body,
            not_found=f"Order {order_id} not found",
        )
        return _parse(Order, data)

    async def mark_ready(self, order_id: str, auth: AuthContext | None = None) -> Order:
        data = await self._request(
            "PUT", f"/staff/orders/{order_id}/ready", auth=auth, not_found=f"Order {order_id} not found",
        )
        return _parse(Order, data)

    async def complete_order(self, order_id: str, auth: AuthContext | None = None) -> Order:
        data = await self._request(
            "PUT", f"/staff/orders/{order_id}/complete", auth=auth, not_found=f"Order {order_id} not found",
        )
        return _parse(Order, data)

    async def cancel_order(self, order_id: str, auth: AuthContext | None = None) -> Order:
        data = await self._request(
            "DELETE", f"/staff/orders/{order_id}", auth=auth, not_found=f"Order {order_id} not found",
        )
        return _parse(Order, data)

    # ── Admin ─────────────────────────────────────────────────────────────────

    async def get_stats(self, auth: AuthContext, date_key: int | None = None) -> dict:
        params = {"date_key": date_key} if date_key is not None else None
        return await self._request("GET", "/admin/stats", auth=auth, params=params)

    async def health(self) -> bool:
        try:
            await self._request("GET", "/health")
        except (TransientApiError, ApiError):
            return False
        return True
