"""Order and OrderItem models.

Rules implemented:
- Order number auto-generated as a human-readable identifier.
- Customer and product FKs use PROTECT to preserve order history.
- OrderItem snapshots product name and price at creation time.
- OrderItem subtotal is always ``quantity * unit_price`` (calculated on save).
- ``subtotal`` is the sum of line subtotals and
  ``total = subtotal + shipping_cost - discount``.
- Only delivered orders carry a rating (score 1-5).
- Orders are never deleted; cancelling is a status change.
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any, Iterable, Optional

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    AUTO_ADVANCE_STATES,
    CANCELLED_NOTE_PREFIX,
    MAX_RATING,
    MIN_RATING,
    ORDER_NUMBER_MAX_RETRIES,
    OrderStatus,
    PaymentMethod,
)
from modules.orders.events import (
    CourierAssigned,
    OrderCancelled,
    OrderCreated,
    OrderRated,
    OrderStatusChanged,
)
from modules.orders.exceptions import InvalidRating, OrderNotDelivered
from modules.orders.state_machine import validate_transition
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)

ZERO = Decimal("0.00")


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    ``order_number`` is a human-readable identifier auto-generated on first
    save (format: ``ORD-YYYYMMDD-XXXXXX``).  The UUIDv7 ``id`` is used for
    all internal references and API lookups.

    ``delivery_address`` is a copy of the address at checkout, not a
    reference into the customer's address book.
    """

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    delivery_address = models.JSONField(default=dict)
    payment_method = models.CharField(
        max_length=10,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH,
    )
    courier = models.ForeignKey(
        "couriers.Courier",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=ZERO)
    shipping_cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("5.00"),
        validators=[MinValueValidator(ZERO)],
    )
    discount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=ZERO,
        validators=[MinValueValidator(ZERO)],
    )
    total = models.DecimalField(max_digits=10, decimal_places=2, default=ZERO)
    notes = models.TextField(blank=True, default="")
    estimated_minutes = models.PositiveIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1)]
    )
    rating_score = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(MIN_RATING), MaxValueValidator(MAX_RATING)],
    )
    rating_comment = models.TextField(blank=True, default="")
    rated_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["customer", "-created_at"], name="orders_customer_idx"),
            models.Index(fields=["courier", "status"], name="orders_courier_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rating_score__isnull=True)
                | models.Q(rating_score__gte=MIN_RATING, rating_score__lte=MAX_RATING),
                name="orders_rating_range",
            ),
        ]

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def recalculate_totals(self, items: Optional[Iterable[OrderItem]] = None) -> None:
        """Recompute ``subtotal`` and ``total`` from the line items."""
        if items is None:
            items = self.items.all()
        self.subtotal = sum((item.subtotal for item in items), ZERO)
        self.total = self.subtotal + self.shipping_cost - self.discount

    @property
    def is_rated(self) -> bool:
        return self.rating_score is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def record_creation(self) -> None:
        self.add_domain_event(
            OrderCreated(
                aggregate_id=self.id,
                customer_id=self.customer_id,
                total=self.total,
            )
        )

    def change_status(self, target: str) -> None:
        """Move to ``target`` after checking the guarded transitions.

        Cancelling through here does not touch notes or the courier; use
        ``OrderService.cancel_order`` for that.
        """
        old_status = self.status
        new_status = validate_transition(old_status, target, self.courier_id)
        self.status = new_status
        if new_status == OrderStatus.DELIVERED:
            self.delivered_at = timezone.now()
        self.add_domain_event(
            OrderStatusChanged(
                aggregate_id=self.id,
                old_status=old_status,
                new_status=new_status,
            )
        )

    def cancel(self, reason: str) -> None:
        """Cancel the order and append ``reason`` to the notes."""
        self.change_status(OrderStatus.CANCELLED)
        note = f"{CANCELLED_NOTE_PREFIX} {reason}".rstrip()
        self.notes = f"{self.notes}\n{note}" if self.notes else note
        self.add_domain_event(OrderCancelled(aggregate_id=self.id, reason=reason))

    def assign_courier(self, courier: Any) -> None:
        """Attach ``courier``; confirmed and preparing orders go en route."""
        self.courier = courier
        if self.status in AUTO_ADVANCE_STATES:
            self.change_status(OrderStatus.EN_ROUTE)
        self.add_domain_event(
            CourierAssigned(
                aggregate_id=self.id,
                courier_id=courier.id,
                status=self.status,
            )
        )

    def rate(self, score: int, comment: str = "") -> bool:
        """Store the customer's rating.

        Returns ``True`` when this is the first rating of the order.

        Raises:
            OrderNotDelivered: if the order has not been delivered.
            InvalidRating: if ``score`` is outside 1-5.
        """
        if self.status != OrderStatus.DELIVERED:
            raise OrderNotDelivered("Only delivered orders can be rated.")
        if not MIN_RATING <= score <= MAX_RATING:
            raise InvalidRating(
                f"Rating must be between {MIN_RATING} and {MAX_RATING}."
            )

        first_rating = not self.is_rated
        self.rating_score = score
        self.rating_comment = comment
        self.rated_at = timezone.now()
        self.add_domain_event(
            OrderRated(
                aggregate_id=self.id,
                score=score,
                courier_id=self.courier_id,
            )
        )
        return first_rating

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"ORD-{now:%Y%m%d}-{suffix}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for _ in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise RuntimeError(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Line item: a priced snapshot of one product within an order.

    ``product_name`` and ``unit_price`` are copied from the product at
    checkout and never follow later catalog changes.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    product_name = models.CharField(max_length=255)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    notes = models.CharField(max_length=255, blank=True, default="")
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, editable=False)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def compute_subtotal(self) -> Decimal:
        self.subtotal = self.unit_price * self.quantity
        return self.subtotal

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.compute_subtotal()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} ({self.subtotal})"
