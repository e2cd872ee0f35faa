"""JSON envelopes returned by every endpoint.

- success: ``{"status": "success", "data": ...}``
- fail:    ``{"status": "fail", "message": ...}``  (4xx)
- error:   ``{"status": "error", "message": ...}`` (5xx)
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.response import Response

from modules.core.exceptions import DomainError

logger = structlog.get_logger(__name__)


def success(data: Any, http_status: int = status.HTTP_200_OK) -> Response:
    return Response({"status": "success", "data": data}, status=http_status)


def fail(message: str, http_status: int = status.HTTP_400_BAD_REQUEST) -> Response:
    return Response({"status": "fail", "message": message}, status=http_status)


def error(
    message: str, http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
) -> Response:
    return Response({"status": "error", "message": message}, status=http_status)


def from_domain_error(exc: DomainError) -> Response:
    """Translate a service-layer error into its envelope and status code."""
    if exc.http_status >= 500:
        logger.error("api.internal_error", error=str(exc), kind=type(exc).__name__)
        return error(str(exc), exc.http_status)
    logger.info("api.request_rejected", error=str(exc), kind=type(exc).__name__)
    return fail(str(exc), exc.http_status)


def from_validation_error(exc: PydanticValidationError) -> Response:
    """Render a DTO validation failure as a 400 ``fail`` envelope."""
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"])
        messages.append(f"{field}: {err['msg']}" if field else err["msg"])
    logger.info("api.validation_failed", errors=messages)
    return fail("; ".join(messages))
