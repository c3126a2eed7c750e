"""Invoice issuing.

``InvoiceIssuer`` is the single write path for invoices. The order
lifecycle calls it inside its own transaction when an order moves to
``invoiced`` (reusing an invoice issued earlier for the same order); the
invoices API calls it directly. Either way the issuer only creates the row;
linking it back onto the order is the caller's job.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import IntegrityError, transaction

from modules.invoices.exceptions import (
    DuplicateInvoiceNumber,
    InvoiceAlreadyIssued,
    InvoiceNotFound,
)
from modules.invoices.models import Invoice
from modules.orders.exceptions import OrderNotFound

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser
    from django.db.models import QuerySet

    from modules.invoices.repositories.interfaces import IInvoiceRepository
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class InvoiceIssuer:
    """Creates an invoice bound to exactly one order.

    Receives the invoice and order repositories via constructor injection.
    """

    def __init__(
        self,
        invoice_repository: IInvoiceRepository,
        order_repository: IOrderRepository,
    ) -> None:
        self._invoice_repo = invoice_repository
        self._order_repo = order_repository

    @transaction.atomic
    def issue(
        self,
        order_id: str,
        invoice_number: str,
        invoice_date: date,
        billed_by: AbstractBaseUser,
    ) -> Invoice:
        """Insert an invoice for *order_id* and return it.

        Raises:
            OrderNotFound: no order with *order_id*.
            DuplicateInvoiceNumber: *invoice_number* is already used.
            InvoiceAlreadyIssued: the order already has an invoice.
        """
        log = logger.bind(order_id=str(order_id), invoice_number=invoice_number)

        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(
                f"Order {order_id} not found.", {"order_id": str(order_id)}
            )

        if self._invoice_repo.number_exists(invoice_number):
            log.warning("invoice.duplicate_number")
            raise self._duplicate(invoice_number)

        if order.invoice_id or self._invoice_repo.get_for_order(str(order.id)):
            log.warning("invoice.already_issued")
            raise InvoiceAlreadyIssued(
                f"Order {order.order_no} already has an invoice.",
                {"order_no": order.order_no},
            )

        invoice = Invoice(
            order=order,
            invoice_number=invoice_number,
            invoice_date=invoice_date,
            billed_by=billed_by,
        )
        try:
            # savepoint keeps the outer transaction usable after IntegrityError
            with transaction.atomic():
                self._invoice_repo.save(invoice)
        except IntegrityError as exc:
            log.warning("invoice.insert_conflict")
            if self._invoice_repo.number_exists(invoice_number):
                raise self._duplicate(invoice_number) from exc
            raise InvoiceAlreadyIssued(
                f"Order {order.order_no} already has an invoice.",
                {"order_no": order.order_no},
            ) from exc

        log.info("invoice.issued", invoice_id=str(invoice.id))
        return invoice

    @transaction.atomic
    def issue_or_reuse(
        self,
        order_id: str,
        invoice_number: str,
        invoice_date: date,
        billed_by: AbstractBaseUser,
    ) -> Invoice:
        """Return the order's invoice, issuing it first if none exists yet.

        An invoice already issued for the order through the invoices API is
        reused when *invoice_number* matches it.

        Raises:
            InvoiceAlreadyIssued: the order has an invoice with another number.
            Anything ``issue`` raises.
        """
        existing = self._invoice_repo.get_for_order(str(order_id))
        if existing is None:
            return self.issue(order_id, invoice_number, invoice_date, billed_by)

        if existing.invoice_number != invoice_number:
            logger.warning(
                "invoice.number_mismatch",
                order_id=str(order_id),
                invoice_number=invoice_number,
                existing_invoice_number=existing.invoice_number,
            )
            raise InvoiceAlreadyIssued(
                f"Order already has invoice {existing.invoice_number}.",
                {
                    "order_id": str(order_id),
                    "invoice_number": invoice_number,
                    "existing_invoice_number": existing.invoice_number,
                },
            )

        logger.info(
            "invoice.reused", order_id=str(order_id), invoice_id=str(existing.id)
        )
        return existing

    @staticmethod
    def _duplicate(invoice_number: str) -> DuplicateInvoiceNumber:
        return DuplicateInvoiceNumber(
            f"Invoice number {invoice_number} is already in use.",
            {"invoice_number": invoice_number},
        )


class InvoiceQueryService:
    def __init__(self, invoice_repository: IInvoiceRepository) -> None:
        self._invoice_repo = invoice_repository

    def get_invoice(self, id: str) -> Invoice:
        invoice = self._invoice_repo.get_by_id(id)
        if not invoice:
            raise InvoiceNotFound(f"Invoice {id} not found.", {"invoice_id": str(id)})
        return invoice

    def list_invoices(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        return self._invoice_repo.list(filters)
