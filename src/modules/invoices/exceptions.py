"""Invoice domain exceptions."""

from __future__ import annotations

from shared.domain.errors import DomainError


class InvoiceNotFound(DomainError):
    """The requested invoice does not exist."""

    code = "invoice_not_found"


class DuplicateInvoiceNumber(DomainError):
    """Another invoice already uses this invoice number."""

    code = "duplicate_invoice_number"


class InvoiceAlreadyIssued(DomainError):
    """The order already has an invoice."""

    code = "invoice_already_issued"
