"""Courier model with coverage zones, live location and soft delete.

Rules implemented:
- Email and document number are unique.
- Coverage zones are a non-empty list of zone names.
- A courier holds at most one ``current_order``; while it is set the
  courier cannot be marked unavailable (enforced by ``set_availability``).
- ``rating`` is the running average (0-5) of the scores of the courier's
  rated deliveries.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from modules.core.models import SoftDeleteModel
from modules.couriers.exceptions import CourierBusy

logger = structlog.get_logger(__name__)


class DocumentType(models.TextChoices):
    DNI = "dni", "DNI"
    CE = "ce", "Carné de extranjería"
    PASSPORT = "passport", "Passport"


class VehicleType(models.TextChoices):
    MOTORCYCLE = "motorcycle", "Motorcycle"
    BICYCLE = "bicycle", "Bicycle"
    CAR = "car", "Car"
    ON_FOOT = "on_foot", "On foot"


class Courier(SoftDeleteModel):
    """Courier aggregate root."""

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=20)
    document_type = models.CharField(max_length=10, choices=DocumentType.choices)
    document_number = models.CharField(max_length=20, unique=True)
    birth_date = models.DateField()
    vehicle_type = models.CharField(max_length=12, choices=VehicleType.choices)
    vehicle_plate = models.CharField(max_length=20, blank=True, default="")
    vehicle_model = models.CharField(max_length=100, blank=True, default="")
    coverage_zones = models.JSONField(default=list)
    is_available = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    last_latitude = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(-90), MaxValueValidator(90)],
    )
    last_longitude = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(-180), MaxValueValidator(180)],
    )
    location_updated_at = models.DateTimeField(null=True, blank=True)
    rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("5"))],
    )
    total_deliveries = models.PositiveIntegerField(default=0)
    current_order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        db_table = "couriers"
        ordering = ["-rating", "last_name"]
        indexes = [
            models.Index(fields=["is_available", "is_active"], name="couriers_avail_idx"),
            models.Index(fields=["-rating"], name="couriers_rating_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(rating__gte=0) & Q(rating__lte=5),
                name="courier_rating_range",
            ),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def clean(self) -> None:
        super().clean()
        if not self.coverage_zones:
            raise ValidationError(
                {"coverage_zones": "At least one coverage zone is required."}
            )

    # ------------------------------------------------------------------
    # Behaviour
    # ------------------------------------------------------------------

    def set_availability(self, is_available: bool) -> None:
        """Change availability.

        Raises:
            CourierBusy: when going unavailable while an order is assigned.
        """
        if not is_available and self.current_order_id is not None:
            raise CourierBusy(
                "Courier cannot be marked unavailable while an order is assigned."
            )
        self.is_available = is_available

    def move_to(self, latitude: float, longitude: float) -> None:
        self.last_latitude = latitude
        self.last_longitude = longitude
        self.location_updated_at = timezone.now()

    def assign(self, order) -> None:
        self.current_order = order

    def release(self) -> None:
        self.current_order = None

    def save(self, *args, **kwargs) -> None:
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.full_name} ({self.get_vehicle_type_display()})"
