"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created."""

    customer_id: UUID
    total: Decimal


@dataclass(frozen=True, kw_only=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an order status changes."""

    old_status: str
    new_status: str


@dataclass(frozen=True, kw_only=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled."""

    reason: str = ""


@dataclass(frozen=True, kw_only=True)
class CourierAssigned(DomainEvent):
    """Raised when a courier takes an order."""

    courier_id: UUID
    status: str


@dataclass(frozen=True, kw_only=True)
class OrderRated(DomainEvent):
    """Raised when a delivered order is rated."""

    score: int
    courier_id: Optional[UUID] = None
