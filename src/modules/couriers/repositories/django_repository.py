"""Django ORM implementation of the Courier repository.

Look-ups return ``None`` for missing or malformed IDs; the Service Layer
turns that into ``CourierNotFound``.

Coverage zones are a JSON list. Backends with JSON containment
(PostgreSQL, MySQL) filter in SQL; elsewhere (SQLite) the match is
resolved in Python and folded back into a queryset by primary key.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import connection, models, transaction

from modules.couriers.models import Courier
from modules.couriers.repositories.interfaces import ICourierRepository

logger = structlog.get_logger(__name__)


class CourierDjangoRepository(ICourierRepository):
    """Concrete Courier repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Courier]:
        try:
            return Courier.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Courier]:
        try:
            return Courier.objects.select_for_update().alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> models.QuerySet[Courier]:
        """List live couriers with optional Django ORM look-ups.

        Examples of valid filters::

            {"is_active": True}
            {"vehicle_type": "bicycle", "is_available": True}
        """
        queryset = Courier.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Courier) -> Courier:
        """Persist (create or update) a courier."""
        is_new = entity._state.adding
        entity.save()
        logger.info("courier.saved", courier_id=str(entity.id), is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Soft-delete a courier by ID."""
        courier = self.get_by_id(id)
        if not courier:
            return False
        courier.delete()
        logger.info("courier.soft_deleted", courier_id=str(id))
        return True

    def get_by_email(self, email: str) -> Optional[Courier]:
        return Courier.objects.filter(email=email.strip().lower()).first()

    def get_by_document(self, document_number: str) -> Optional[Courier]:
        return Courier.objects.filter(document_number=document_number.strip()).first()

    def available(self, zones: Sequence[str] = ()) -> models.QuerySet[Courier]:
        queryset = Courier.objects.alive().filter(is_available=True, is_active=True)
        if zones:
            queryset = self._covering(queryset, zones)
        return queryset.order_by("-rating", "last_name")

    def by_zone(self, zone: str) -> models.QuerySet[Courier]:
        queryset = Courier.objects.alive().filter(is_active=True)
        return self._covering(queryset, [zone])

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _covering(
        queryset: models.QuerySet[Courier], zones: Sequence[str]
    ) -> models.QuerySet[Courier]:
        if connection.features.supports_json_field_contains:
            condition = models.Q()
            for zone in zones:
                condition |= models.Q(coverage_zones__contains=[zone])
            return queryset.filter(condition)

        wanted = set(zones)
        matching = [
            pk
            for pk, covered in queryset.values_list("id", "coverage_zones")
            if wanted.intersection(covered or [])
        ]
        return queryset.filter(id__in=matching)
