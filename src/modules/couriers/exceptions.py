"""Courier domain exceptions.

Raised by the Service Layer and the Courier aggregate. The API layer
translates them into the JSON envelope.
"""

from __future__ import annotations

from modules.core.exceptions import InvalidArgument, NotFound, PreconditionFailed


class CourierNotFound(NotFound):
    """The requested courier does not exist or has been soft-deleted."""


class CourierAlreadyExists(InvalidArgument):
    """Email or document number already belongs to another courier."""


class InvalidCourierData(InvalidArgument):
    """Location, zones or another courier payload is malformed."""


class CourierUnavailable(PreconditionFailed):
    """The courier is flagged as not available for new assignments."""


class CourierBusy(PreconditionFailed):
    """The courier holds an assigned order."""


class CourierHasActiveOrders(PreconditionFailed):
    """The courier still has confirmed, preparing or en-route orders."""
