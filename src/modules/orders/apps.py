from django.apps import AppConfig


class OrdersConfig(AppConfig):
    name = "modules.orders"
    label = "orders"
    verbose_name = "Order lifecycle"

    def ready(self) -> None:
        from modules.orders.events import (
            CourierAssigned,
            OrderCancelled,
            OrderCreated,
            OrderRated,
            OrderStatusChanged,
        )
        from modules.orders.handlers import (
            courier_assigned_handler,
            order_cancelled_handler,
            order_created_handler,
            order_rated_handler,
            order_status_changed_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(OrderCreated, order_created_handler)
        event_bus.subscribe(OrderStatusChanged, order_status_changed_handler)
        event_bus.subscribe(OrderCancelled, order_cancelled_handler)
        event_bus.subscribe(CourierAssigned, courier_assigned_handler)
        event_bus.subscribe(OrderRated, order_rated_handler)
