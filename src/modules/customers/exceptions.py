"""Customer domain exceptions.

Raised by the Service Layer (and the Customer aggregate itself) when
business rules are violated. The API layer translates them into the JSON
envelope.
"""

from __future__ import annotations

from modules.core.exceptions import InvalidArgument, NotFound


class CustomerAlreadyExists(InvalidArgument):
    """A customer with the same email already exists."""


class CustomerNotFound(NotFound):
    """The requested customer does not exist or has been soft-deleted."""


class AddressNotFound(NotFound):
    """The customer has no address with the requested id."""
