"""
Order Service — Role-gated JWT Authentication Middleware

/staff/* accepts staff or admin tokens, /admin/* only admin tokens.
Everything else (ordering, status, queue, menu, health) is public.
"""
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from jose import JWTError

from order_service.core.security import Role, decode_token

PROTECTED_PREFIXES: dict[str, set[str]] = {
    "/staff": {Role.STAFF.value, Role.ADMIN.value},
    "/admin": {Role.ADMIN.value},
}


def _required_roles(path: str) -> set[str] | None:
    for prefix, roles in PROTECTED_PREFIXES.items():
        if path == prefix or path.startswith(prefix + "/"):
            return roles
    return None


def _unauthorized(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"detail": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


class RoleAuthMiddleware(BaseHTTPMiddleware):
    """
    Validates the Bearer token on protected routes and attaches the
    decoded claims to request.state.user.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            return await call_next(request)

        roles = _required_roles(request.url.path)
        if roles is None:
            return await call_next(request)

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return _unauthorized("Missing or invalid Authorization header. Expected: Bearer <token>")

        token = auth_header.split(" ", 1)[1]
        try:
            claims = decode_token(token)
        except JWTError as exc:
            return _unauthorized(f"Invalid or expired token: {exc}")

        if claims.get("role") not in roles:
            return JSONResponse(status_code=403, content={"detail": "Insufficient role for this resource."})

        request.state.user = claims
        return await call_next(request)
