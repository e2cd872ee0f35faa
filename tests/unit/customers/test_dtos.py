"""Unit tests for Customer and Address DTOs."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from modules.customers.dtos import (
    AddressDTO,
    CreateCustomerDTO,
    UpdateAddressDTO,
    UpdateCustomerDTO,
)

pytestmark = pytest.mark.unit


class TestAddressDTO:
    def test_defaults(self):
        dto = AddressDTO(street="Av. Larco", number="345", district="Miraflores")
        assert dto.city == "Lima"
        assert dto.reference == ""
        assert dto.is_default is False

    @pytest.mark.parametrize("field", ["street", "number", "district"])
    def test_required_fields_not_blank(self, field):
        payload = {"street": "Av. Larco", "number": "345", "district": "Miraflores"}
        payload[field] = "  "
        with pytest.raises(ValidationError):
            AddressDTO.model_validate(payload)

    def test_missing_district(self):
        with pytest.raises(ValidationError):
            AddressDTO.model_validate({"street": "Av. Larco", "number": "345"})


class TestUpdateAddressDTO:
    def test_changes_excludes_unset(self):
        assert UpdateAddressDTO(is_default=True).changes() == {"is_default": True}


class TestCreateCustomerDTO:
    def test_email_lower_cased(self):
        dto = CreateCustomerDTO(
            first_name="Ana",
            last_name="Quispe",
            email="ANA@Example.com",
            phone="987654321",
        )
        assert dto.email == "ana@example.com"
        assert dto.addresses == []

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            CreateCustomerDTO(
                first_name="Ana", last_name="Quispe", email="nope", phone="987"
            )

    def test_nested_addresses_validated(self):
        with pytest.raises(ValidationError):
            CreateCustomerDTO.model_validate(
                {
                    "first_name": "Ana",
                    "last_name": "Quispe",
                    "email": "ana@example.com",
                    "phone": "987654321",
                    "addresses": [{"street": "Av. Larco"}],
                }
            )

    def test_blank_first_name(self):
        with pytest.raises(ValidationError):
            CreateCustomerDTO(
                first_name=" ", last_name="Quispe", email="a@b.pe", phone="987"
            )


class TestUpdateCustomerDTO:
    def test_changes(self):
        dto = UpdateCustomerDTO(phone=" 999888777 ", is_active=False)
        assert dto.changes() == {"phone": "999888777", "is_active": False}
