"""Sales order and its status audit trail.

- ``so_no`` is minted by ``SequenceAllocator`` at creation and never edited.
- ``company`` picks the numbering sequence and is fixed after creation.
- ``status`` only moves along ``VALID_TRANSITIONS`` (enforced in
  ``OrderLifecycleService``); each move appends an ``OrderStatusHistory`` row.
- ``invoice`` is set by the ``invoiced`` transition and nowhere else.
- Orders are hard-deleted; the delete operation hands back a snapshot.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import TERMINAL_STATES, Company, OrderStatus, allowed_next
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, BaseModel):
    """Sales order aggregate root."""

    company = models.CharField(max_length=8, choices=Company.choices)
    so_no = models.CharField(max_length=64, unique=True, editable=False)
    order_no = models.CharField(max_length=255, unique=True)
    so_date = models.DateField()
    order_date = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    client_contact_person = models.ForeignKey(
        "clients.ContactPerson",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    initiated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders_initiated",
    )
    checked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders_checked",
    )
    dispatched_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders_dispatched",
    )
    invoice = models.OneToOneField(
        "invoices.Invoice",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="linked_order",
    )
    drive_link = models.CharField(max_length=500, blank=True, default="")
    dispatched_date = models.DateField(null=True, blank=True)
    dispatch_remarks = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["company", "status"], name="orders_company_status_idx"),
            models.Index(
                fields=["dispatched_by", "status"], name="orders_dispatcher_idx"
            ),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def allowed_next_statuses(self) -> tuple[str, ...]:
        return allowed_next(self.status)

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in allowed_next(self.status)

    def __str__(self) -> str:
        return f"{self.so_no} ({self.status})"


class OrderStatusHistory(BaseModel):
    """Append-only record of one status change.

    ``old_status`` is ``None`` for the row written at creation. ``user`` is
    the actor; ``None`` once that user has been removed.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_status_changes",
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="osh_order_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.old_status} -> {self.new_status}"
