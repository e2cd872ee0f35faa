"""Courier service layer (Use Cases).

Orchestrates the courier fleet, delegating persistence to the injected
``ICourierRepository``.  Order look-ups needed by the deletion guard and
the statistics go through an ``IOrderRepository``.

Business rules enforced here:
- Email and document number are unique.
- A courier with confirmed, preparing or en-route orders cannot be deleted.
- A courier holding an order cannot be marked unavailable.
- A location update needs both latitude and longitude (validated by DTO).
- Coverage zones can never become empty (validated by DTO).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

import structlog
from django.db import models, transaction

from modules.couriers.exceptions import (
    CourierAlreadyExists,
    CourierHasActiveOrders,
    CourierNotFound,
)
from modules.couriers.models import Courier
from modules.couriers.stats import DeliveryStats, delivery_stats

if TYPE_CHECKING:
    from modules.couriers.dtos import (
        CreateCourierDTO,
        LocationDTO,
        UpdateCourierDTO,
    )
    from modules.couriers.repositories.interfaces import ICourierRepository
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class CourierService:
    """Application service for Courier use-cases."""

    def __init__(
        self,
        repository: ICourierRepository,
        order_repository: IOrderRepository,
    ) -> None:
        self._repo = repository
        self._order_repo = order_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_courier(self, dto: CreateCourierDTO) -> Courier:
        """Register a courier.

        Raises:
            CourierAlreadyExists: if email or document number is taken.
        """
        log = logger.bind(email=dto.email, document_type=dto.document_type)

        if self._repo.get_by_email(dto.email):
            log.warning("courier.duplicate_email")
            raise CourierAlreadyExists("Email already registered.")
        if self._repo.get_by_document(dto.document_number):
            log.warning("courier.duplicate_document")
            raise CourierAlreadyExists("Document number already registered.")

        courier = self._repo.save(Courier(**dto.model_dump()))
        log.info("courier.created", courier_id=str(courier.id))
        return courier

    @transaction.atomic
    def update_courier(self, id: str, dto: UpdateCourierDTO) -> Courier:
        """Apply the supplied profile fields.

        Raises:
            CourierNotFound: if the courier does not exist.
            CourierAlreadyExists: if the new email belongs to someone else.
        """
        courier = self._get_or_raise(id, lock=True)
        changes = dto.changes()

        if "email" in changes and changes["email"] != courier.email:
            if self._repo.get_by_email(changes["email"]):
                raise CourierAlreadyExists("Email already registered.")

        for field, value in changes.items():
            setattr(courier, field, value)

        courier = self._repo.save(courier)
        logger.info("courier.updated", courier_id=str(id), fields=sorted(changes))
        return courier

    @transaction.atomic
    def delete_courier(self, id: str) -> None:
        """Soft-delete a courier with no active orders.

        Raises:
            CourierNotFound: if the courier does not exist.
            CourierHasActiveOrders: if any order is confirmed, preparing
                or en route with this courier.
        """
        courier = self._get_or_raise(id, lock=True)
        active = self._order_repo.count_active_for_courier(courier.id)
        if active:
            logger.warning(
                "courier.delete_blocked", courier_id=str(id), active_orders=active
            )
            raise CourierHasActiveOrders(
                f"Courier has {active} active order(s) and cannot be deleted."
            )
        self._repo.delete(id)
        logger.info("courier.deleted", courier_id=str(id))

    @transaction.atomic
    def set_availability(self, id: str, is_available: bool) -> Courier:
        """Raises ``CourierBusy`` when going unavailable with an order assigned."""
        courier = self._get_or_raise(id, lock=True)
        courier.set_availability(is_available)
        courier = self._repo.save(courier)
        logger.info(
            "courier.availability_changed",
            courier_id=str(id),
            is_available=is_available,
        )
        return courier

    @transaction.atomic
    def update_location(self, id: str, dto: LocationDTO) -> Courier:
        courier = self._get_or_raise(id, lock=True)
        courier.move_to(dto.lat, dto.lng)
        courier = self._repo.save(courier)
        logger.debug("courier.location_updated", courier_id=str(id))
        return courier

    @transaction.atomic
    def update_zones(self, id: str, zones: Sequence[str]) -> Courier:
        courier = self._get_or_raise(id, lock=True)
        courier.coverage_zones = list(zones)
        courier = self._repo.save(courier)
        logger.info("courier.zones_updated", courier_id=str(id), zones=list(zones))
        return courier

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_courier(self, id: str) -> Courier:
        """Retrieve a single courier by ID.

        Raises:
            CourierNotFound: if the courier does not exist.
        """
        return self._get_or_raise(id)

    def list_couriers(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> models.QuerySet[Courier]:
        return self._repo.list(filters)

    def list_available(self, zones: Sequence[str] = ()) -> models.QuerySet[Courier]:
        """Available and active couriers, best rated first.

        With ``zones`` only couriers covering at least one of them are returned.
        """
        return self._repo.available([z.strip() for z in zones if z.strip()])

    def list_by_zone(self, zone: str) -> models.QuerySet[Courier]:
        return self._repo.by_zone(zone.strip())

    def get_stats(self, id: str) -> DeliveryStats:
        """Delivery statistics computed from the courier's delivered orders.

        Raises:
            CourierNotFound: if the courier does not exist.
        """
        courier = self._get_or_raise(id)
        stats = delivery_stats(self._order_repo.delivered_for_courier(courier.id))
        logger.info(
            "courier.stats_computed",
            courier_id=str(id),
            total_deliveries=stats.total_deliveries,
        )
        return stats

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_or_raise(self, id: str, lock: bool = False) -> Courier:
        courier = self._repo.get_for_update(id) if lock else self._repo.get_by_id(id)
        if not courier:
            raise CourierNotFound(f"Courier {id} not found.")
        return courier
