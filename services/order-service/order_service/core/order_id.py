"""
Order Service — Order ID and date key helpers

Order IDs are DDMMXXX: two-digit day of month, two-digit month and a
three-digit sequence within that day, e.g. "1401001" is 14 January,
order 1. The date key is the DDMM part as an integer (1401).
"""
from datetime import datetime
from zoneinfo import ZoneInfo

from order_service.core.config import get_settings

settings = get_settings()

ORDER_ID_LENGTH = 7
MIN_DATE_KEY = 101
MAX_DATE_KEY = 3112


def generate_order_id(day_of_month: int, month: int, sequence: int) -> str:
    if not 1 <= day_of_month <= 31:
        raise ValueError(f"day must be 1-31, got {day_of_month}")
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    if not 1 <= sequence <= 999:
        raise ValueError(f"sequence must be 1-999, got {sequence}")
    return f"{day_of_month:02d}{month:02d}{sequence:03d}"


def order_id_for_date_key(date_key: int, sequence: int) -> str:
    return generate_order_id(date_key // 100, date_key % 100, sequence)


def parse_order_id(order_id: str) -> tuple[int, int, int]:
    """Return (day_of_month, month, sequence). Raises ValueError on malformed IDs."""
    if len(order_id) != ORDER_ID_LENGTH or not order_id.isdigit():
        raise ValueError(f"invalid order ID: {order_id!r}")
    day, month, sequence = int(order_id[0:2]), int(order_id[2:4]), int(order_id[4:7])
    if not 1 <= day <= 31:
        raise ValueError(f"day out of range: {day}")
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    if not 1 <= sequence <= 999:
        raise ValueError(f"sequence out of range: {sequence}")
    return day, month, sequence


def is_valid_order_id(order_id: str, expected_date_key: int | None = None) -> bool:
    try:
        day, month, _ = parse_order_id(order_id)
    except ValueError:
        return False
    if expected_date_key is not None and day * 100 + month != expected_date_key:
        return False
    return True


def date_key_from_order_id(order_id: str) -> int:
    day, month, _ = parse_order_id(order_id)
    return day * 100 + month


def date_key_for(moment: datetime) -> int:
    return moment.day * 100 + moment.month


def is_valid_date_key(date_key: int) -> bool:
    if not MIN_DATE_KEY <= date_key <= MAX_DATE_KEY:
        return False
    return 1 <= date_key // 100 <= 31 and 1 <= date_key % 100 <= 12


def current_date_key() -> int:
    """Date key of the booth's operating day, in the configured timezone."""
    return date_key_for(datetime.now(ZoneInfo(settings.TIMEZONE)))
