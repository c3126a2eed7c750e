"""Django ORM implementation of the invoice repository."""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.invoices.models import Invoice
from modules.invoices.repositories.interfaces import IInvoiceRepository

logger = structlog.get_logger(__name__)


class InvoiceDjangoRepository(IInvoiceRepository):
    def get_by_id(self, id: str) -> Optional[Invoice]:
        try:
            return (
                Invoice.objects.select_related("order", "billed_by")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = Invoice.objects.select_related("order", "billed_by")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def number_exists(self, invoice_number: str) -> bool:
        return Invoice.objects.filter(invoice_number=invoice_number).exists()

    def get_for_order(self, order_id: str) -> Optional[Invoice]:
        return Invoice.objects.filter(order_id=order_id).first()

    @transaction.atomic
    def save(self, entity: Invoice) -> Invoice:
        entity.save()
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        invoice = self.get_by_id(id)
        if not invoice:
            return False
        invoice.delete()
        logger.info("invoice.deleted", invoice_id=str(id))
        return True
