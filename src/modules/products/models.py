"""Menu product model.

Rules implemented:
- Product name is unique across the menu.
- Price cannot be negative.
- Preparation time is at least one minute; calories cannot be negative.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel) so
  historical order lines keep resolving their product reference.

Orders never read the live price after creation: line items snapshot
``name`` and ``price`` at checkout.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class ProductCategory(models.TextChoices):
    STARTERS = "starters", "Starters"
    MAINS = "mains", "Main courses"
    DESSERTS = "desserts", "Desserts"
    DRINKS = "drinks", "Drinks"
    SIDES = "sides", "Sides"


class Product(SoftDeleteModel):
    """Menu item aggregate root."""

    name = models.CharField(max_length=255, unique=True)
    description = models.TextField()
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    category = models.CharField(max_length=20, choices=ProductCategory.choices)
    image = models.CharField(max_length=255, default="default-product.jpg")
    is_available = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)
    preparation_minutes = models.PositiveIntegerField(
        default=15,
        validators=[MinValueValidator(1)],
    )
    ingredients = models.JSONField(default=list, blank=True)
    allergens = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    calories = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category"], name="products_category_idx"),
            models.Index(fields=["is_available"], name="products_available_idx"),
            models.Index(fields=["is_featured"], name="products_featured_idx"),
            models.Index(fields=["price"], name="products_price_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.name:
            self.name = self.name.strip()
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})
        if self.category and self.category not in ProductCategory.values:
            raise ValidationError({"category": "Unknown category."})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.name:
            self.name = self.name.strip()
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=str(self.id),
                name=self.name,
                category=self.category,
            )

    def __str__(self) -> str:
        return f"{self.name} ({self.category})"
