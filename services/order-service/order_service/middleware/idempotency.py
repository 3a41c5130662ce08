"""
Order Service — Idempotency-Key cache for order intake

Devices send their temporary order ID as Idempotency-Key on every attempt
to create the same order. The first answer is kept in Redis for
IDEMPOTENCY_KEY_TTL_SECONDS and replayed verbatim (X-Idempotency-Replay)
without touching the database. Server errors are not cached, so a failed
attempt can be retried.

Redis is a fast path only: the key is also stored on the order row
(client_ref), and create_order() returns the existing order on a repeat.
"""
import json
import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware

from order_service.core.config import get_settings
from order_service.core.redis_client import get_redis

settings = get_settings()
logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"
REPLAY_HEADER = "X-Idempotency-Replay"
CACHE_PREFIX = "idempotent:"
ORDER_INTAKE_PATHS = {"/orders", "/orders/"}


def _applies(request: Request) -> bool:
    return request.method == "POST" and request.url.path in ORDER_INTAKE_PATHS


class IdempotencyMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        key = request.headers.get(IDEMPOTENCY_HEADER)
        if not key or not _applies(request):
            return await call_next(request)

        cache_key = CACHE_PREFIX + key
        redis = get_redis()
        try:
            cached = await redis.get(cache_key)
        except RedisError as exc:
            logger.warning("Idempotency cache unavailable, relying on client_ref: %s", exc)
            return await call_next(request)

        if cached:
            entry = json.loads(cached)
            logger.info("Replaying cached response for %s", key)
            return JSONResponse(
                content=entry["body"],
                status_code=entry["status_code"],
                headers={REPLAY_HEADER: "true"},
            )

        response = await call_next(request)
        raw = b"".join([chunk async for chunk in response.body_iterator])

        if response.status_code < 500:
            await self._remember(redis, cache_key, raw, response.status_code)

        return Response(
            content=raw,
            status_code=response.status_code,
            media_type=response.media_type,
            headers=dict(response.headers),
        )

    async def _remember(self, redis, cache_key: str, raw: bytes, status_code: int) -> None:
        try:
            body = json.loads(raw)
        except ValueError:
            body = raw.decode("utf-8", errors="replace")
        entry = json.dumps({"body": body, "status_code": status_code})
        try:
            await redis.setex(cache_key, settings.IDEMPOTENCY_KEY_TTL_SECONDS, entry)
        except RedisError as exc:
            logger.warning("Could not cache response under %s: %s", cache_key, exc)
