"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF views)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: one requested line (product, quantity, notes).
- ``CreateOrderDTO``: input for order creation (nested items + address).
- ``UpdateOrderDTO``: editable order fields.
- ``StatusDTO`` / ``AssignCourierDTO`` / ``RateOrderDTO`` /
  ``CancelOrderDTO``: bodies of the lifecycle endpoints.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.customers.dtos import AddressDTO
from modules.orders.constants import (
    MAX_ITEM_QUANTITY,
    MAX_RATING,
    MIN_RATING,
    MONEY_DECIMAL_PLACES,
    MONEY_MAX_DIGITS,
    OrderStatus,
    PaymentMethod,
)


def _money(**kwargs: Any) -> Any:
    return Field(
        ge=0,
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        **kwargs,
    )

# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single order line in a creation request.

    The client sends ``product_id`` and ``quantity``; name and price are
    resolved by the Service Layer from the live catalog.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int = Field(ge=1, le=MAX_ITEM_QUANTITY)
    notes: str = ""

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v: str) -> str:
        return v.strip()


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one line.
    - shipping cost and discount are not negative and fit a money column.
    - each line quantity is between 1 and ``MAX_ITEM_QUANTITY``.
    - the initial status, when given, is not ``delivered`` (a new order
      has no courier yet).
    """

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    items: List[CreateOrderItemDTO]
    delivery_address: AddressDTO
    payment_method: PaymentMethod = PaymentMethod.CASH
    shipping_cost: Optional[Decimal] = _money(default=None)
    discount: Optional[Decimal] = _money(default=None)
    notes: str = ""
    estimated_minutes: Optional[int] = Field(default=None, ge=1)
    status: Optional[OrderStatus] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @field_validator("status")
    @classmethod
    def not_born_delivered(cls, v: Optional[OrderStatus]) -> Optional[OrderStatus]:
        if v == OrderStatus.DELIVERED:
            raise ValueError("A new order cannot start as delivered.")
        return v


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------


class UpdateOrderDTO(BaseModel):
    """Partial order update.

    Line items, status, courier and rating have their own operations and
    are not accepted here.
    """

    model_config = ConfigDict(frozen=True)

    delivery_address: Optional[AddressDTO] = None
    payment_method: Optional[PaymentMethod] = None
    shipping_cost: Optional[Decimal] = _money(default=None)
    discount: Optional[Decimal] = _money(default=None)
    notes: Optional[str] = None
    estimated_minutes: Optional[int] = Field(default=None, ge=1)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class StatusDTO(BaseModel):
    """Target status; unknown values are rejected by the service."""

    model_config = ConfigDict(frozen=True)

    status: str


class AssignCourierDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    courier_id: UUID


class RateOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=MIN_RATING, le=MAX_RATING)
    comment: str = ""


class CancelOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: str = ""

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str) -> str:
        return v.strip()
