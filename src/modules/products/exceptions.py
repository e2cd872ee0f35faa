"""Product domain exceptions.

Raised by the Service Layer when catalog rules are violated.
The API layer (Views) translates them into HTTP responses.
"""

from __future__ import annotations

from modules.core.exceptions import InvalidArgument, NotFound, Unavailable


class ProductAlreadyExists(InvalidArgument):
    """A product with the same name is already on the menu."""


class ProductNotFound(NotFound):
    """The requested product does not exist or has been soft-deleted."""


class ProductUnavailable(Unavailable):
    """The product exists but is flagged as not available for ordering."""


class InvalidProductData(InvalidArgument):
    """The product payload failed validation."""
