"""Sequence domain exceptions."""

from __future__ import annotations

from shared.domain.errors import DomainError


class InvalidCompanyCode(DomainError):
    """The company code is blank once normalized."""

    code = "invalid_company_code"


class CounterNotFound(DomainError):
    """The requested counter does not exist."""

    code = "counter_not_found"


class DuplicateCounterPrefix(DomainError):
    """Another counter already owns this prefix."""

    code = "duplicate_counter_prefix"
