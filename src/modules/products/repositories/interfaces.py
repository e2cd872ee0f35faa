"""Product repository interface.

Extends ``IRepository[Product]`` with the catalog look-ups used by the
menu endpoints and by order pricing.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List live products with optional filters."""

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Product]:
        """Retrieve a product by its (unique) name, case-insensitively."""

    @abstractmethod
    def featured(self, limit: int) -> "models.QuerySet[Product]":
        """Featured products, newest first, capped at ``limit``."""

    @abstractmethod
    def search(self, query: str) -> "models.QuerySet[Product]":
        """Products whose name, description or tags contain ``query``."""
