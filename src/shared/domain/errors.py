"""Base class for every business-rule failure raised by the service layer."""

from __future__ import annotations

from typing import Any, Dict, Optional


class DomainError(Exception):
    """A rejected operation with a stable machine-readable ``code``.

    ``context`` carries the values that explain the rejection (current
    status, offending field, duplicate number) and is echoed to API clients.
    """

    code = "domain_error"

    def __init__(self, message: str = "", context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.context: Dict[str, Any] = dict(context or {})

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""
