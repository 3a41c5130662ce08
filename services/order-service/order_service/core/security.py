"""
Order Service — Role credentials and JWT utilities

Each role (staff, admin) has one shared password. A successful login
exchanges it for a short-lived bearer JWT carrying the role claim.
"""
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from jose import jwt

from order_service.core.config import get_settings

settings = get_settings()


class Role(str, Enum):
    STAFF = "staff"
    ADMIN = "admin"


def _role_password(role: Role) -> str:
    if role == Role.ADMIN:
        return settings.ADMIN_PASSWORD
    return settings.STAFF_PASSWORD


def verify_role_password(role: Role, password: str) -> bool:
    expected = _role_password(role)
    if not expected:
        return False
    return secrets.compare_digest(password.encode("utf-8"), expected.encode("utf-8"))


def create_access_token(role: Role) -> str:
    expire = datetime.now(tz=timezone.utc) + timedelta(
        minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
    )
    payload = {"sub": role.value, "role": role.value, "exp": expire, "jti": str(uuid.uuid4())}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT. Raises JWTError on failure."""
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
