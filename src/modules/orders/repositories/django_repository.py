"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Write operations run inside ``transaction.atomic()`` so the Order
aggregate (Order + OrderItems) is persisted as a unit.

Lifecycle commands lock the order row with ``select_for_update()``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.orders.constants import ACTIVE_STATES, OrderStatus
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, order: Order, items: Sequence[OrderItem]) -> Order:
        """Insert the order, then its items, then store the final totals."""
        order.save()
        for item in items:
            item.order = order
            item.save()

        order.recalculate_totals(items)
        order.save(update_fields=["subtotal", "total"])

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(items),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _base_queryset(self) -> models.QuerySet[Order]:
        return Order.objects.select_related("customer", "courier").prefetch_related(
            "items"
        )

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return self._base_queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        The nullable courier is not joined: PostgreSQL refuses to lock the
        nullable side of an outer join.
        """
        try:
            return (
                Order.objects.select_for_update()
                .prefetch_related("items")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet[Order]:
        """List orders with optional Django ORM look-ups.

        Examples of valid filters::

            {"status": "pending"}
            {"customer_id": "...", "created_at__date__gte": "2024-01-01"}
        """
        queryset = self._base_queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset.order_by("-created_at")

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist changes to an existing order."""
        entity.save()
        logger.info("order.saved", order_id=str(entity.id), status=entity.status)
        return entity

    def delete(self, id: str) -> bool:
        raise NotImplementedError("Orders are never deleted; cancel them instead.")

    # ------------------------------------------------------------------
    # Courier-related queries
    # ------------------------------------------------------------------

    def count_active_for_courier(self, courier_id: Any) -> int:
        return Order.objects.filter(
            courier_id=courier_id, status__in=ACTIVE_STATES
        ).count()

    def rated_scores_for_courier(self, courier_id: Any) -> List[int]:
        return list(
            Order.objects.filter(
                courier_id=courier_id,
                status=OrderStatus.DELIVERED,
                rating_score__isnull=False,
            ).values_list("rating_score", flat=True)
        )

    def delivered_for_courier(
        self, courier_id: Any
    ) -> List[Tuple[Optional[datetime], Optional[int]]]:
        return list(
            Order.objects.filter(
                courier_id=courier_id, status=OrderStatus.DELIVERED
            ).values_list("delivered_at", "rating_score")
        )
