"""Order service layer (Use Cases).

The order lifecycle engine: creation and pricing against the live
catalog, status changes, cancellation, courier assignment and rating
aggregation.  Every command is atomic (the service defines the
unit-of-work boundary) and locks the order row before touching it.

Rules enforced:
- Customer, products and couriers must resolve (``NotFound``).
- Every product on the order must be available (``Unavailable``).
- ``total = subtotal + shipping_cost - discount`` and never below zero.
- ``delivered`` needs a courier; delivered orders cannot be cancelled.
- Cancelling or delivering releases the courier currently holding the order.
- Assigning a courier moves confirmed/preparing orders en route.
- Only delivered orders are rated; a rating recomputes the courier's
  average over all of its delivered and rated orders.

Domain events collected by the aggregate are published on the event bus
once the transaction commits.
"""

from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import DatabaseError, models, transaction

from modules.couriers.exceptions import CourierNotFound, CourierUnavailable
from modules.couriers.stats import average_rating
from modules.customers.exceptions import CustomerNotFound
from modules.orders.constants import MAX_MONEY_AMOUNT, OrderStatus
from modules.orders.exceptions import (
    InvalidOrderData,
    OrderNotFound,
    OrderPersistenceError,
)
from modules.orders.models import Order, OrderItem
from modules.orders.state_machine import parse_status
from modules.products.exceptions import ProductNotFound, ProductUnavailable
from shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from modules.couriers.models import Courier
    from modules.couriers.repositories.interfaces import ICourierRepository
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


@contextmanager
def _store_errors(action: str, **context: Any) -> Iterator[None]:
    """Re-raise database failures as ``OrderPersistenceError``."""
    try:
        yield
    except DatabaseError as exc:
        logger.error("order.store_failed", action=action, error=str(exc), **context)
        raise OrderPersistenceError(f"Failed to {action}: {exc}") from exc


def _parse_id(value: str, label: str) -> UUID:
    try:
        return UUID(str(value))
    except ValueError:
        raise InvalidOrderData(f"Invalid {label} id '{value}'.") from None


class OrderService:
    """Application service for Order use-cases.

    Receives repositories (and optionally the event bus) via constructor
    injection.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
        product_repository: IProductRepository,
        courier_repository: ICourierRepository,
        event_bus: Optional[IEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository
        self._product_repo = product_repository
        self._courier_repo = courier_repository
        self._event_bus = event_bus or default_event_bus

    # ------------------------------------------------------------------
    # Creation & pricing
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Price the requested lines against the catalog and persist the order.

        Every line is validated before anything is written, so a missing
        or unavailable product leaves no trace.

        Raises:
            CustomerNotFound: customer does not exist.
            ProductNotFound: a product does not exist.
            ProductUnavailable: a product is flagged as not available.
            InvalidOrderData: the discount exceeds subtotal plus shipping, or
                an amount does not fit a money column.
        """
        log = logger.bind(customer_id=str(dto.customer_id))
        log.info("order.creation_started", item_count=len(dto.items))

        customer = self._customer_repo.get_by_id(str(dto.customer_id))
        if not customer:
            raise CustomerNotFound(f"Customer {dto.customer_id} not found.")

        items: List[OrderItem] = []
        for line in dto.items:
            product = self._product_repo.get_by_id(str(line.product_id))
            if not product:
                raise ProductNotFound(f"Product {line.product_id} not found.")
            if not product.is_available:
                log.warning("order.product_unavailable", product_id=str(product.id))
                raise ProductUnavailable(f"Product '{product.name}' is not available.")

            item = OrderItem(
                product=product,
                product_name=product.name,
                unit_price=product.price,
                quantity=line.quantity,
                notes=line.notes,
            )
            item.compute_subtotal()
            items.append(item)

        order = Order(
            customer=customer,
            status=dto.status or OrderStatus.PENDING,
            delivery_address=dto.delivery_address.model_dump(),
            payment_method=dto.payment_method,
            shipping_cost=(
                dto.shipping_cost
                if dto.shipping_cost is not None
                else settings.DEFAULT_SHIPPING_COST
            ),
            discount=dto.discount if dto.discount is not None else Decimal("0"),
            notes=dto.notes,
            estimated_minutes=dto.estimated_minutes,
        )
        order.recalculate_totals(items)
        self._ensure_valid_totals(order, items)

        with _store_errors("create order", customer_id=str(customer.id)):
            order = self._order_repo.create(order, items)
            customer.touch_last_order()
            self._customer_repo.save(customer)

        order.record_creation()
        self._publish_on_commit(order)
        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total=str(order.total),
        )
        return self.get_order(str(order.id))

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    @transaction.atomic
    def update_status(self, order_id: str, new_status: str) -> Order:
        """Move an order to ``new_status``.

        Setting ``cancelled`` applies the same rules as ``cancel_order``;
        reaching ``delivered`` frees the courier for its next order.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: unknown status.
            OrderWithoutCourier: ``delivered`` without an assigned courier.
            OrderAlreadyDelivered: cancelling a delivered order.
        """
        order = self._lock_order(order_id)
        target = parse_status(new_status)

        if target == OrderStatus.CANCELLED:
            return self._cancel(order, reason="")

        log = logger.bind(
            order_id=str(order_id), current_status=order.status, new_status=target
        )
        order.change_status(target)
        with _store_errors("update order status", order_id=str(order_id)):
            self._order_repo.save(order)
            if target == OrderStatus.DELIVERED:
                self._release_courier(order)

        self._publish_on_commit(order)
        log.info("order.status_updated")
        return self.get_order(order_id)

    @transaction.atomic
    def cancel_order(self, order_id: str, reason: str = "") -> Order:
        """Cancel an order, note the reason and free its courier.

        Raises:
            OrderNotFound: order does not exist.
            OrderAlreadyDelivered: the order was already delivered.
        """
        order = self._lock_order(order_id)
        return self._cancel(order, reason)

    def _cancel(self, order: Order, reason: str) -> Order:
        log = logger.bind(order_id=str(order.id), current_status=order.status)
        order.cancel(reason)

        with _store_errors("cancel order", order_id=str(order.id)):
            self._order_repo.save(order)
            released = self._release_courier(order)

        self._publish_on_commit(order)
        log.info(
            "order.cancelled",
            released_courier_id=str(released.id) if released else None,
        )
        return self.get_order(str(order.id))

    # ------------------------------------------------------------------
    # Courier assignment
    # ------------------------------------------------------------------

    @transaction.atomic
    def assign_courier(self, order_id: str, courier_id: str) -> Order:
        """Hand an order to a courier.

        Raises:
            CourierNotFound: courier does not exist.
            OrderNotFound: order does not exist.
            CourierUnavailable: the courier is flagged as not available.
        """
        courier = self._courier_repo.get_for_update(str(courier_id))
        if not courier:
            raise CourierNotFound(f"Courier {courier_id} not found.")

        order = self._lock_order(order_id)
        log = logger.bind(order_id=str(order_id), courier_id=str(courier_id))

        if not courier.is_available:
            log.warning("order.courier_unavailable")
            raise CourierUnavailable(f"Courier {courier.full_name} is not available.")

        with _store_errors("assign courier", order_id=str(order_id)):
            if order.courier_id and order.courier_id != courier.id:
                self._release_courier(order)

            order.assign_courier(courier)
            self._order_repo.save(order)
            courier.assign(order)
            self._courier_repo.save(courier)

        self._publish_on_commit(order)
        log.info("courier.assigned", status=order.status)
        return self.get_order(order_id)

    def _release_courier(self, order: Order) -> Optional[Courier]:
        """Free the order's courier if it is still holding this order."""
        if not order.courier_id:
            return None
        courier = self._courier_repo.get_for_update(str(order.courier_id))
        if not courier or courier.current_order_id != order.id:
            return None
        courier.release()
        self._courier_repo.save(courier)
        logger.info(
            "courier.released", courier_id=str(courier.id), order_id=str(order.id)
        )
        return courier

    # ------------------------------------------------------------------
    # Rating
    # ------------------------------------------------------------------

    @transaction.atomic
    def rate_order(self, order_id: str, score: int, comment: str = "") -> Order:
        """Attach a rating and fold it into the courier's average.

        ``total_deliveries`` only grows on the first rating of an order;
        re-rating replaces the score without counting the delivery twice.

        Raises:
            OrderNotFound: order does not exist.
            OrderNotDelivered: the order has not been delivered.
            InvalidRating: score outside 1-5.
        """
        order = self._lock_order(order_id)
        log = logger.bind(order_id=str(order_id), score=score)
        first_rating = order.rate(score, comment)

        with _store_errors("rate order", order_id=str(order_id)):
            self._order_repo.save(order)
            if order.courier_id:
                self._refresh_courier_rating(order.courier_id, first_rating)

        self._publish_on_commit(order)
        log.info("order.rated", first_rating=first_rating)
        return self.get_order(order_id)

    def _refresh_courier_rating(self, courier_id: Any, count_delivery: bool) -> None:
        courier = self._courier_repo.get_for_update(str(courier_id))
        if not courier:
            return
        scores = self._order_repo.rated_scores_for_courier(courier.id)
        courier.rating = average_rating(scores)
        if count_delivery:
            courier.total_deliveries += 1
        self._courier_repo.save(courier)
        logger.info(
            "courier.rating_updated",
            courier_id=str(courier.id),
            rating=str(courier.rating),
            rated_orders=len(scores),
            total_deliveries=courier.total_deliveries,
        )

    # ------------------------------------------------------------------
    # Field updates
    # ------------------------------------------------------------------

    @transaction.atomic
    def update_order(self, order_id: str, dto: UpdateOrderDTO) -> Order:
        """Change editable fields and recompute the totals.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderData: the discount exceeds subtotal plus shipping, or
                an amount does not fit a money column.
        """
        order = self._lock_order(order_id)
        changes = dto.changes()

        for field, value in changes.items():
            setattr(order, field, value)
        order.recalculate_totals()
        self._ensure_valid_totals(order)

        with _store_errors("update order", order_id=str(order_id)):
            self._order_repo.save(order)

        logger.info("order.updated", order_id=str(order_id), fields=sorted(changes))
        return self.get_order(order_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> models.QuerySet[Order]:
        return self._order_repo.list(filters)

    def list_by_customer(self, customer_id: str) -> models.QuerySet[Order]:
        return self._order_repo.list(
            {"customer_id": _parse_id(customer_id, "customer")}
        )

    def list_by_courier(self, courier_id: str) -> models.QuerySet[Order]:
        return self._order_repo.list({"courier_id": _parse_id(courier_id, "courier")})

    def list_by_status(self, status: str) -> models.QuerySet[Order]:
        """Orders in ``status``, newest first.

        Raises:
            InvalidOrderStatus: unknown status.
        """
        return self._order_repo.list({"status": parse_status(status)})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_order(self, order_id: str) -> Order:
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    @staticmethod
    def _ensure_valid_totals(order: Order, items: Iterable[OrderItem] = ()) -> None:
        if order.total < 0:
            raise InvalidOrderData(
                "Discount cannot exceed the order subtotal plus shipping cost."
            )
        amounts = [order.subtotal, order.total, *(item.subtotal for item in items)]
        if any(amount > MAX_MONEY_AMOUNT for amount in amounts):
            raise InvalidOrderData(f"Order amounts cannot exceed {MAX_MONEY_AMOUNT}.")

    def _publish_on_commit(self, order: Order) -> None:
        events = order.pull_domain_events()
        if events:
            transaction.on_commit(lambda: self._event_bus.publish_all(events))
