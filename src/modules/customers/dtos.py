"""Customer DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF views)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``AddressDTO``: one delivery address (also used as the order snapshot).
- ``UpdateAddressDTO``: partial address change.
- ``CreateCustomerDTO`` / ``UpdateCustomerDTO``: customer input.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


def _strip_required(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Field must not be empty.")
    return v.strip()


class AddressDTO(BaseModel):
    """Immutable delivery address.

    ``street``, ``number`` and ``district`` are required; ``city``
    defaults to Lima.
    """

    model_config = ConfigDict(frozen=True)

    street: str
    number: str
    district: str
    city: str = "Lima"
    reference: str = ""
    is_default: bool = False

    @field_validator("street", "number", "district", "city")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("reference")
    @classmethod
    def strip_reference(cls, v: str) -> str:
        return v.strip()


class UpdateAddressDTO(BaseModel):
    """Partial address update; only supplied fields change."""

    model_config = ConfigDict(frozen=True)

    street: Optional[str] = None
    number: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    reference: Optional[str] = None
    is_default: Optional[bool] = None

    @field_validator("street", "number", "district", "city")
    @classmethod
    def must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        return _strip_required(v) if v is not None else v

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


class CreateCustomerDTO(BaseModel):
    """Immutable DTO for customer creation requests.

    Validates:
    - names and phone are non-empty.
    - ``email`` is a well-formed address (Pydantic ``EmailStr``),
      normalised to lower case.
    """

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    addresses: List[AddressDTO] = Field(default_factory=list)

    @field_validator("first_name", "last_name", "phone")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class UpdateCustomerDTO(BaseModel):
    """Immutable DTO for customer update requests.

    All fields are optional; addresses are managed through their own
    endpoints.
    """

    model_config = ConfigDict(frozen=True)

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("first_name", "last_name", "phone")
    @classmethod
    def must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        return _strip_required(v) if v is not None else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v is not None else v

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
