"""Error taxonomy shared by every module.

Services raise subclasses of these; the API layer maps each family to
an HTTP status code:

- ``NotFound``            -> 404 (referenced entity absent)
- ``InvalidArgument``     -> 400 (malformed / out-of-range input)
- ``PreconditionFailed``  -> 400 (valid input, current state forbids it)
- ``Unavailable``         -> 400 (entity exists but is flagged not-usable)
- ``InternalError``       -> 500 (unexpected store failure)
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for every error raised by the service layer."""

    http_status: int = 500


class NotFound(DomainError):
    http_status = 404


class InvalidArgument(DomainError):
    http_status = 400


class PreconditionFailed(DomainError):
    http_status = 400


class Unavailable(DomainError):
    http_status = 400


class InternalError(DomainError):
    http_status = 500
