"""Translation of domain errors into DRF responses."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.response import Response

from shared.domain.errors import DomainError


def error_response(exc: Exception, http_status: int) -> Response:
    """Build ``{"detail", "code", **context}`` for a rejected operation.

    Plain exceptions only carry ``detail``.
    """
    body = {"detail": str(exc)}
    if isinstance(exc, DomainError):
        body["code"] = exc.code
        for key, value in exc.context.items():
            body.setdefault(key, value)
    return Response(body, status=http_status)


def invalid_payload_response(exc: Exception) -> Response:
    """400 for a payload the DTO layer rejected."""
    if isinstance(exc, PydanticValidationError):
        return Response(
            {
                "detail": "Invalid payload.",
                "errors": exc.errors(include_url=False, include_context=False),
            },
            status=status.HTTP_400_BAD_REQUEST,
        )
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
