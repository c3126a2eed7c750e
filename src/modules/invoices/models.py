"""Invoice model.

An invoice belongs to at most one order and an order to at most one
invoice. ``order`` is ``SET_NULL`` so billing records outlive a deleted
order.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class Invoice(BaseModel):
    invoice_number = models.CharField(max_length=255, unique=True)
    invoice_date = models.DateField()
    order = models.OneToOneField(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="issued_invoice",
    )
    billed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="invoices_billed",
    )

    class Meta:
        db_table = "invoices"
        ordering = ["-invoice_date", "-created_at"]
        indexes = [
            models.Index(fields=["-invoice_date"], name="invoices_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.invoice_number} ({self.invoice_date})"
