"""
Booth Client — Provisional order IDs and date keys

A provisional ID is TEMP-<epoch ms>-<6 random chars>. It is only a local
storage key and idempotency key; it never looks like a real DDMMXXX ID.
"""
import secrets
import string
import time
from datetime import datetime
from zoneinfo import ZoneInfo

from booth_client.config import get_settings

TEMP_PREFIX = "TEMP-"
_ALPHABET = string.ascii_lowercase + string.digits


def generate_temp_id() -> str:
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    return f"{TEMP_PREFIX}{int(time.time() * 1000)}-{suffix}"


def is_temp_id(order_id: str) -> bool:
    return order_id.startswith(TEMP_PREFIX)


def current_date_key(now: datetime | None = None) -> int:
    """DDMM of the booth's operating day, e.g. 14 January → 1401."""
    now = now or datetime.now(ZoneInfo(get_settings().TIMEZONE))
    return now.day * 100 + now.month
