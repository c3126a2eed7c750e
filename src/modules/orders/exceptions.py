"""Order domain exceptions.

Raised by the service layer; the views translate them to HTTP responses
with the exception's ``code`` and ``context`` in the body.
"""

from __future__ import annotations

from typing import Any, Optional

from shared.domain.errors import DomainError


class OrderNotFound(DomainError):
    """The requested order does not exist."""

    code = "order_not_found"


class UserNotFound(DomainError):
    """A referenced user does not exist or is inactive."""

    code = "user_not_found"


class DuplicateOrderNumber(DomainError):
    """Another order already uses this ``order_no``."""

    code = "duplicate_order_number"

    def __init__(self, order_no: str) -> None:
        super().__init__(
            f"Order number {order_no} is already in use.", {"order_no": order_no}
        )


class OrderLifecycleError(DomainError):
    """A status transition request was rejected by a business rule."""

    code = "order_lifecycle_error"


class InvalidTransition(OrderLifecycleError):
    code = "invalid_transition"

    def __init__(self, current_status: str, requested_status: str) -> None:
        super().__init__(
            f"Cannot transition from {current_status} to {requested_status}.",
            {
                "current_status": str(current_status),
                "requested_status": str(requested_status),
            },
        )
        self.current_status = str(current_status)
        self.requested_status = str(requested_status)


class MissingRequiredField(OrderLifecycleError):
    code = "missing_required_field"

    def __init__(self, field: str, status: Optional[str] = None) -> None:
        context = {"field": field}
        if status:
            context["requested_status"] = str(status)
        super().__init__(f"Field '{field}' is required.", context)
        self.field = field


class InvalidFieldValue(OrderLifecycleError):
    code = "invalid_field_value"

    def __init__(self, field: str, value: Any, reason: str = "") -> None:
        super().__init__(
            f"Invalid value for '{field}'{': ' + reason if reason else ''}.",
            {"field": field, "value": str(value)},
        )
        self.field = field
