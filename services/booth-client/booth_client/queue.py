"""
Booth Client — Queue position calculator
"""
from booth_client.models import Order, OrderStatus, QueuePosition


def queue_position(orders: list[Order], order_id: str) -> QueuePosition:
    """
    Position of order_id among PAID orders with a queue number, sorted by
    queue number. position is 1-based; 0 means the order is not queued.
    """
    queued = sorted(
        (o for o in orders if o.status == OrderStatus.PAID and o.queue_number is not None),
        key=lambda o: o.queue_number,
    )
    for index, order in enumerate(queued, start=1):
        if order.id == order_id:
            return QueuePosition(position=index, total=len(queued))
    return QueuePosition(position=0, total=len(queued))
