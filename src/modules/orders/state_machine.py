"""Order status transition rules.

Only two transitions are guarded:

- ``delivered`` needs an assigned courier.
- ``cancelled`` is refused once the order has been delivered.

Every other move, backwards ones included, is allowed.
"""

from __future__ import annotations

from typing import Optional

from modules.orders.constants import OrderStatus
from modules.orders.exceptions import (
    InvalidOrderStatus,
    OrderAlreadyDelivered,
    OrderWithoutCourier,
)


def parse_status(value: str) -> OrderStatus:
    """Coerce ``value`` into an ``OrderStatus``.

    Raises:
        InvalidOrderStatus: if ``value`` is not one of the six statuses.
    """
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidOrderStatus(
            f"Invalid status '{value}'. "
            f"Expected one of: {', '.join(OrderStatus.values)}."
        ) from None


def validate_transition(
    current: str, target: str, courier_id: Optional[object] = None
) -> OrderStatus:
    """Check that an order in ``current`` may move to ``target``.

    Returns the parsed target status.
    """
    new_status = parse_status(target)

    if new_status == OrderStatus.DELIVERED and courier_id is None:
        raise OrderWithoutCourier(
            "An order cannot be delivered without an assigned courier."
        )
    if new_status == OrderStatus.CANCELLED and current == OrderStatus.DELIVERED:
        raise OrderAlreadyDelivered("A delivered order cannot be cancelled.")

    return new_status
