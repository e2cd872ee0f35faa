"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF views)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
- ``AvailabilityDTO`` / ``FeaturedDTO``: flag toggles.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from modules.products.models import ProductCategory


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``name`` and ``description`` are non-empty.
    - ``price`` is not negative and fits ``Decimal(10, 2)``.
    - ``category`` belongs to the menu categories.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    category: ProductCategory
    image: Optional[str] = None
    is_available: bool = True
    is_featured: bool = False
    preparation_minutes: int = Field(default=15, ge=1)
    ingredients: List[str] = Field(default_factory=list)
    allergens: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    calories: Optional[int] = Field(default=None, ge=0)

    @field_validator("name", "description")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field must not be empty.")
        return v.strip()


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    All fields are optional; only supplied fields will be updated.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(
        default=None, ge=0, max_digits=10, decimal_places=2
    )
    category: Optional[ProductCategory] = None
    image: Optional[str] = None
    is_available: Optional[bool] = None
    is_featured: Optional[bool] = None
    preparation_minutes: Optional[int] = Field(default=None, ge=1)
    ingredients: Optional[List[str]] = None
    allergens: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    calories: Optional[int] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Name must not be empty.")
        return v.strip() if v is not None else v

    def changes(self) -> dict:
        """Fields explicitly supplied by the caller."""
        return self.model_dump(exclude_none=True)


class AvailabilityDTO(BaseModel):
    """Body of ``PATCH /products/{id}/availability/``."""

    model_config = ConfigDict(frozen=True)

    is_available: StrictBool


class FeaturedDTO(BaseModel):
    """Body of ``PATCH /products/{id}/featured/``."""

    model_config = ConfigDict(frozen=True)

    is_featured: StrictBool
