"""Order repository interface.

Extends ``IRepository[Order]`` with the aggregate-level operations of the
lifecycle engine: atomic creation with items, row locking, and the
per-courier queries behind rating aggregation and the deletion guard.

The Service Layer depends exclusively on this contract.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes its OrderItem children.  Mutations must
    be atomic.
    """

    @abstractmethod
    def create(self, order: Order, items: Sequence[OrderItem]) -> Order:
        """Persist a new order together with its line items."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order and lock its row until the transaction ends."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Order]":
        """List orders, newest first, with optional filters."""

    @abstractmethod
    def count_active_for_courier(self, courier_id: Any) -> int:
        """Number of confirmed, preparing or en-route orders of a courier."""

    @abstractmethod
    def rated_scores_for_courier(self, courier_id: Any) -> List[int]:
        """Scores of every delivered and rated order of a courier."""

    @abstractmethod
    def delivered_for_courier(
        self, courier_id: Any
    ) -> List[Tuple[Optional[datetime], Optional[int]]]:
        """``(delivered_at, rating_score)`` of every delivered order of a courier."""
