"""Customer model with an embedded address book and soft delete.

Rules implemented:
- Email is unique across the system and stored lower-cased.
- Addresses live inside the customer row as a JSON list; each entry has a
  locally-unique ``id`` and is only mutated through the aggregate methods.
- At most one address is flagged ``is_default``; flagging a new default
  unsets every other one.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

import uuid
from typing import Any, Dict

import structlog
from django.db import models
from django.utils import timezone

from modules.core.models import SoftDeleteModel
from modules.customers.exceptions import AddressNotFound

logger = structlog.get_logger(__name__)


class Customer(SoftDeleteModel):
    """Customer aggregate root."""

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=20)
    addresses = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    last_order_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="customers_created_idx"),
            models.Index(fields=["phone"], name="customers_phone_idx"),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def default_address(self) -> Dict[str, Any] | None:
        return next((a for a in self.addresses if a.get("is_default")), None)

    # ------------------------------------------------------------------
    # Address book
    # ------------------------------------------------------------------

    def _find_address(self, address_id: str) -> Dict[str, Any]:
        for address in self.addresses:
            if address.get("id") == str(address_id):
                return address
        raise AddressNotFound(f"Address {address_id} not found.")

    def _clear_default(self) -> None:
        for address in self.addresses:
            address["is_default"] = False

    def add_address(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Append an address and return it with its generated ``id``."""
        address = {**data, "id": str(uuid.uuid4())}
        address["is_default"] = bool(address.get("is_default"))
        if address["is_default"]:
            self._clear_default()
        self.addresses = [*self.addresses, address]
        return address

    def update_address(self, address_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Merge ``changes`` into an existing address.

        Raises:
            AddressNotFound: if ``address_id`` is not in the address book.
        """
        address = self._find_address(address_id)
        if changes.get("is_default") and not address.get("is_default"):
            self._clear_default()
        address.update({k: v for k, v in changes.items() if k != "id"})
        return address

    def remove_address(self, address_id: str) -> None:
        address = self._find_address(address_id)
        self.addresses = [a for a in self.addresses if a is not address]

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def touch_last_order(self) -> None:
        self.last_order_at = timezone.now()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.full_name
