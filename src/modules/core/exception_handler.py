"""DRF exception handler rendering framework errors in the API envelope.

Domain errors are translated by the views themselves; this handler covers
what DRF raises on its own (parse errors, validation errors, unknown routes,
method not allowed) plus any ``DomainError`` that escaped a view.
"""

from __future__ import annotations

from typing import Any

import structlog
from rest_framework.response import Response
from rest_framework.views import exception_handler

from modules.core import responses
from modules.core.exceptions import DomainError

logger = structlog.get_logger(__name__)


def _flatten(detail: Any) -> str:
    if isinstance(detail, dict):
        return "; ".join(f"{key}: {_flatten(value)}" for key, value in detail.items())
    if isinstance(detail, list):
        return ", ".join(_flatten(item) for item in detail)
    return str(detail)


def envelope_exception_handler(exc: Exception, context: dict) -> Response:
    if isinstance(exc, DomainError):
        return responses.from_domain_error(exc)

    response = exception_handler(exc, context)
    if response is None:
        logger.exception("api.unhandled_error", error=str(exc))
        return responses.error("Unexpected server error.")

    message = _flatten(getattr(exc, "detail", str(exc)))

    envelope_status = "error" if response.status_code >= 500 else "fail"
    logger.info(
        "api.framework_error",
        status_code=response.status_code,
        error=message,
    )
    response.data = {"status": envelope_status, "message": message}
    return response
