"""Courier repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.couriers.models import Courier


class ICourierRepository(IRepository["Courier"]):
    """Repository contract for the Courier aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Courier]":
        """List live couriers with optional filters."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Courier]:
        """Retrieve a live courier and lock its row until the transaction ends."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Courier]:
        """Retrieve a courier by email (soft-deleted included)."""

    @abstractmethod
    def get_by_document(self, document_number: str) -> Optional[Courier]:
        """Retrieve a courier by document number (soft-deleted included)."""

    @abstractmethod
    def available(self, zones: Sequence[str] = ()) -> "models.QuerySet[Courier]":
        """Available, active couriers covering any of ``zones``, best rated first."""

    @abstractmethod
    def by_zone(self, zone: str) -> "models.QuerySet[Courier]":
        """Active couriers whose coverage includes ``zone``."""
