"""Order domain exceptions.

Raised by the lifecycle rules and the Service Layer. The API layer
translates them into the JSON envelope. Missing customers, products and
couriers are reported with the exceptions of their own modules.
"""

from __future__ import annotations

from modules.core.exceptions import (
    InternalError,
    InvalidArgument,
    NotFound,
    PreconditionFailed,
)


class OrderNotFound(NotFound):
    """The requested order does not exist."""


class InvalidOrderStatus(InvalidArgument):
    """The requested status is not one of the recognised values."""


class InvalidOrderData(InvalidArgument):
    """The order payload failed validation."""


class InvalidRating(InvalidArgument):
    """The rating score lies outside 1-5."""


class OrderWithoutCourier(PreconditionFailed):
    """The order needs an assigned courier for this operation."""


class OrderAlreadyDelivered(PreconditionFailed):
    """The order was delivered and can no longer be cancelled."""


class OrderNotDelivered(PreconditionFailed):
    """Only delivered orders can be rated."""


class OrderPersistenceError(InternalError):
    """The order store failed while applying a change."""
