"""Unit tests for CustomerService.

Covers:
- Registration with unique, lower-cased emails and an initial address book.
- Updates, soft delete and the address-book operations.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.customers.dtos import (
    AddressDTO,
    CreateCustomerDTO,
    UpdateAddressDTO,
    UpdateCustomerDTO,
)
from modules.customers.exceptions import (
    AddressNotFound,
    CustomerAlreadyExists,
    CustomerNotFound,
)
from modules.customers.models import Customer
from modules.customers.repositories import CustomerDjangoRepository
from modules.customers.services import CustomerService

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def service():
    return CustomerService(repository=CustomerDjangoRepository())


def _create_dto(**overrides) -> CreateCustomerDTO:
    payload = {
        "first_name": "Carla",
        "last_name": "Huamán",
        "email": "carla@example.com",
        "phone": "955123456",
    }
    payload.update(overrides)
    return CreateCustomerDTO.model_validate(payload)


def _address(**overrides) -> AddressDTO:
    payload = {"street": "Av. Grau", "number": "410", "district": "Barranco"}
    payload.update(overrides)
    return AddressDTO.model_validate(payload)


# ===========================================================================
# Commands
# ===========================================================================


class TestCreateCustomer:
    def test_creates_with_addresses(self, service):
        customer = service.create_customer(
            _create_dto(
                addresses=[
                    {"street": "Av. Grau", "number": "410", "district": "Barranco"},
                    {
                        "street": "Jr. Ucayali",
                        "number": "77",
                        "district": "Cercado",
                        "is_default": True,
                    },
                ]
            )
        )

        stored = Customer.objects.get(pk=customer.pk)
        assert len(stored.addresses) == 2
        assert stored.default_address["street"] == "Jr. Ucayali"
        assert all(a["id"] for a in stored.addresses)

    def test_duplicate_email_rejected(self, service):
        service.create_customer(_create_dto())
        with pytest.raises(CustomerAlreadyExists):
            service.create_customer(_create_dto(email="CARLA@example.com"))

    def test_email_of_deleted_customer_still_taken(self, service, make_customer):
        ghost = make_customer(email="ghost@example.com")
        ghost.delete()
        with pytest.raises(CustomerAlreadyExists):
            service.create_customer(_create_dto(email="ghost@example.com"))


class TestUpdateCustomer:
    def test_updates_fields(self, service, customer):
        updated = service.update_customer(
            str(customer.id), UpdateCustomerDTO(last_name="Rojas")
        )
        assert updated.last_name == "Rojas"

    def test_email_collision(self, service, make_customer):
        taken = make_customer()
        other = make_customer()
        with pytest.raises(CustomerAlreadyExists):
            service.update_customer(str(other.id), UpdateCustomerDTO(email=taken.email))

    def test_missing_customer(self, service):
        with pytest.raises(CustomerNotFound):
            service.update_customer(str(uuid4()), UpdateCustomerDTO(phone="1"))


class TestDeleteCustomer:
    def test_soft_delete_hides_customer(self, service, customer):
        service.delete_customer(str(customer.id))

        assert Customer.objects.filter(pk=customer.pk).exists()
        with pytest.raises(CustomerNotFound):
            service.get_customer(str(customer.id))
        assert customer not in service.list_customers()


# ===========================================================================
# Address book
# ===========================================================================


class TestAddressBook:
    def test_add_default_address_unsets_previous(self, service, customer):
        service.add_address(str(customer.id), _address(is_default=True))
        updated = service.add_address(
            str(customer.id), _address(street="Av. Sáenz Peña", is_default=True)
        )

        defaults = [a for a in updated.addresses if a["is_default"]]
        assert len(defaults) == 1
        assert defaults[0]["street"] == "Av. Sáenz Peña"

    def test_update_address_persists(self, service, customer):
        customer = service.add_address(str(customer.id), _address())
        address_id = customer.addresses[0]["id"]

        service.update_address(
            str(customer.id), address_id, UpdateAddressDTO(reference="Frente al parque")
        )

        customer.refresh_from_db()
        assert customer.addresses[0]["reference"] == "Frente al parque"

    def test_remove_address(self, service, customer):
        customer = service.add_address(str(customer.id), _address())
        address_id = customer.addresses[0]["id"]

        updated = service.remove_address(str(customer.id), address_id)

        assert updated.addresses == []

    def test_unknown_address(self, service, customer):
        with pytest.raises(AddressNotFound):
            service.remove_address(str(customer.id), str(uuid4()))
