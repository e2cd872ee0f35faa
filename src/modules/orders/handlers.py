"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import (
    CourierAssigned,
    OrderCancelled,
    OrderCreated,
    OrderRated,
    OrderStatusChanged,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            customer_id=str(event.customer_id),
            total=str(event.total),
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=str(event.aggregate_id),
            reason=event.reason,
        )


class CourierAssignedHandler(IEventHandler[CourierAssigned]):
    def handle(self, event: CourierAssigned) -> None:
        logger.info(
            "order.event.courier_assigned",
            order_id=str(event.aggregate_id),
            courier_id=str(event.courier_id),
            status=event.status,
        )


class OrderRatedHandler(IEventHandler[OrderRated]):
    def handle(self, event: OrderRated) -> None:
        logger.info(
            "order.event.rated",
            order_id=str(event.aggregate_id),
            score=event.score,
            courier_id=str(event.courier_id) if event.courier_id else None,
        )


order_created_handler = OrderCreatedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_cancelled_handler = OrderCancelledHandler()
courier_assigned_handler = CourierAssignedHandler()
order_rated_handler = OrderRatedHandler()
