"""Courier DTOs for the Service Layer.

Frozen pydantic v2 models validating courier payloads before they reach
``CourierService``.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StrictBool,
    field_validator,
)

from modules.couriers.models import DocumentType, VehicleType


def _clean_zones(zones: List[str]) -> List[str]:
    cleaned = []
    for zone in zones:
        zone = zone.strip()
        if zone and zone not in cleaned:
            cleaned.append(zone)
    if not cleaned:
        raise ValueError("At least one coverage zone is required.")
    return cleaned


class CreateCourierDTO(BaseModel):
    """Immutable DTO for courier registration.

    Validates:
    - names, phone and document number are non-empty.
    - ``coverage_zones`` has at least one non-blank zone (duplicates dropped).
    - ``birth_date`` lies in the past.
    """

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    email: EmailStr
    phone: str
    document_type: DocumentType
    document_number: str
    birth_date: date
    vehicle_type: VehicleType
    vehicle_plate: str = ""
    vehicle_model: str = ""
    coverage_zones: List[str]
    is_available: bool = True
    is_active: bool = True

    @field_validator("first_name", "last_name", "phone", "document_number")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Field must not be empty.")
        return v.strip()

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("coverage_zones")
    @classmethod
    def zones_not_empty(cls, v: List[str]) -> List[str]:
        return _clean_zones(v)

    @field_validator("birth_date")
    @classmethod
    def born_in_the_past(cls, v: date) -> date:
        if v >= date.today():
            raise ValueError("Birth date must be in the past.")
        return v


class UpdateCourierDTO(BaseModel):
    """Partial courier update.

    Availability, location and zones have dedicated endpoints, so they
    are not accepted here.
    """

    model_config = ConfigDict(frozen=True)

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    vehicle_type: Optional[VehicleType] = None
    vehicle_plate: Optional[str] = None
    vehicle_model: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("first_name", "last_name", "phone")
    @classmethod
    def must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Field must not be empty.")
        return v.strip() if v is not None else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v is not None else v

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class AvailabilityDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_available: StrictBool


class LocationDTO(BaseModel):
    """Last known position; both coordinates are required."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class ZonesDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    coverage_zones: List[str]

    @field_validator("coverage_zones")
    @classmethod
    def zones_not_empty(cls, v: List[str]) -> List[str]:
        return _clean_zones(v)
