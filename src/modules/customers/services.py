"""Customer service layer (Use Cases).

Orchestrates business logic for the Customer aggregate, delegating
persistence to the injected ``ICustomerRepository``.

Business rules enforced here:
- Email must be unique.
- At most one default address (enforced by the aggregate methods).
- Soft delete via repository.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import models, transaction

from modules.customers.exceptions import CustomerAlreadyExists, CustomerNotFound
from modules.customers.models import Customer

if TYPE_CHECKING:
    from modules.customers.dtos import (
        AddressDTO,
        CreateCustomerDTO,
        UpdateAddressDTO,
        UpdateCustomerDTO,
    )
    from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerService:
    """Application service for Customer use-cases.

    Receives an ``ICustomerRepository`` via constructor injection.
    """

    def __init__(self, repository: ICustomerRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_customer(self, dto: CreateCustomerDTO) -> Customer:
        """Register a customer, optionally with an initial address book.

        Raises:
            CustomerAlreadyExists: if the email is already taken.
        """
        log = logger.bind(email=dto.email)

        if self._repo.get_by_email(dto.email):
            log.warning("customer.duplicate_email")
            raise CustomerAlreadyExists("Email already registered.")

        customer = Customer(
            first_name=dto.first_name,
            last_name=dto.last_name,
            email=dto.email,
            phone=dto.phone,
        )
        for address in dto.addresses:
            customer.add_address(address.model_dump())

        customer = self._repo.save(customer)
        log.info("customer.created", customer_id=str(customer.id))
        return customer

    @transaction.atomic
    def update_customer(self, id: str, dto: UpdateCustomerDTO) -> Customer:
        """Update an existing customer with the supplied fields.

        Raises:
            CustomerNotFound: if the customer does not exist.
            CustomerAlreadyExists: if the new email collides.
        """
        customer = self._get_or_raise(id)
        log = logger.bind(customer_id=str(id))
        changes = dto.changes()

        if "email" in changes and changes["email"] != customer.email:
            if self._repo.get_by_email(changes["email"]):
                log.warning("customer.duplicate_email")
                raise CustomerAlreadyExists("Email already registered.")

        for field, value in changes.items():
            setattr(customer, field, value)

        customer = self._repo.save(customer)
        log.info("customer.updated", fields=sorted(changes))
        return customer

    @transaction.atomic
    def delete_customer(self, id: str) -> None:
        """Soft-delete a customer.

        Raises:
            CustomerNotFound: if the customer does not exist.
        """
        self._get_or_raise(id)
        self._repo.delete(id)
        logger.info("customer.deleted", customer_id=str(id))

    # ------------------------------------------------------------------
    # Address book
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_address(self, id: str, dto: AddressDTO) -> Customer:
        customer = self._get_or_raise(id)
        address = customer.add_address(dto.model_dump())
        customer = self._repo.save(customer)
        logger.info(
            "customer.address_added",
            customer_id=str(id),
            address_id=address["id"],
            is_default=address["is_default"],
        )
        return customer

    @transaction.atomic
    def update_address(
        self, id: str, address_id: str, dto: UpdateAddressDTO
    ) -> Customer:
        """Change an address; flagging it default unsets the others.

        Raises:
            CustomerNotFound: if the customer does not exist.
            AddressNotFound: if the address is not in the customer's book.
        """
        customer = self._get_or_raise(id)
        customer.update_address(address_id, dto.changes())
        customer = self._repo.save(customer)
        logger.info(
            "customer.address_updated", customer_id=str(id), address_id=address_id
        )
        return customer

    @transaction.atomic
    def remove_address(self, id: str, address_id: str) -> Customer:
        customer = self._get_or_raise(id)
        customer.remove_address(address_id)
        customer = self._repo.save(customer)
        logger.info(
            "customer.address_removed", customer_id=str(id), address_id=address_id
        )
        return customer

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_customers(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> models.QuerySet[Customer]:
        """Return live customers, optionally filtered."""
        return self._repo.list(filters)

    def get_customer(self, id: str) -> Customer:
        """Retrieve a single customer by ID.

        Raises:
            CustomerNotFound: if the customer does not exist.
        """
        return self._get_or_raise(id)

    def _get_or_raise(self, id: str) -> Customer:
        customer = self._repo.get_by_id(id)
        if not customer:
            raise CustomerNotFound(f"Customer {id} not found.")
        return customer
