"""Integration-level unit tests for OrderLifecycleService transitions.

Covers:
- Happy path through dispatch, partial dispatch and completion.
- Rejections: wrong graph edge, terminal states, missing or malformed
  extra fields, unknown dispatcher, unknown order.
- Invoicing from short_closed creates and links exactly one invoice.
- Any failure leaves status, history, invoices and outbox untouched.
"""

from __future__ import annotations

from datetime import date

import pytest
from django.utils import timezone

from modules.core.models import OutboxEvent
from modules.invoices.exceptions import DuplicateInvoiceNumber, InvoiceAlreadyIssued
from modules.invoices.models import Invoice
from modules.invoices.repositories import InvoiceDjangoRepository
from modules.invoices.services import InvoiceIssuer
from modules.orders.exceptions import (
    InvalidFieldValue,
    InvalidTransition,
    MissingRequiredField,
    OrderNotFound,
    UserNotFound,
)
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.repositories import OrderDjangoRepository

pytestmark = pytest.mark.unit

INVOICE_EXTRA = {"invoice_number": "INV-1", "invoice_date": "2025-01-01"}


@pytest.fixture()
def pending_order(make_order):
    return make_order()


@pytest.fixture()
def move(order_service, sales_user, dispatcher):
    """Apply a chain of transitions, supplying the required extras."""

    def _move(order, *statuses, **extra):
        result = None
        for target in statuses:
            payload = dict(extra)
            if target == "dispatched":
                payload.setdefault("dispatched_by", dispatcher.pk)
            result = order_service.request_transition(
                order.order_no, target, actor=sales_user, extra=payload
            )
        order.refresh_from_db()
        return result

    return _move


def _snapshot(order: Order) -> tuple:
    return (
        Order.objects.get(pk=order.pk).status,
        OrderStatusHistory.objects.filter(order=order).count(),
        OutboxEvent.objects.filter(aggregate_id=str(order.id)).count(),
        Invoice.objects.count(),
    )


class TestHappyPath:
    def test_dispatch_sets_side_effects(self, pending_order, order_service, sales_user, dispatcher):
        result = order_service.request_transition(
            pending_order.order_no,
            "dispatched",
            actor=sales_user,
            extra={
                "dispatched_by": dispatcher.pk,
                "dispatch_remarks": "Sent by road",
                "drive_link": "https://drive.example.com/po-1001",
            },
        )

        pending_order.refresh_from_db()
        assert result.previous_status == "pending"
        assert result.status == "dispatched"
        assert result.invoice_id is None
        assert pending_order.status == "dispatched"
        assert pending_order.dispatched_by == dispatcher
        assert pending_order.initiated_by == sales_user
        assert pending_order.dispatched_date == timezone.localdate()
        assert pending_order.dispatch_remarks == "Sent by road"
        assert pending_order.drive_link == "https://drive.example.com/po-1001"

    def test_history_row_per_transition(self, pending_order, move, sales_user):
        move(pending_order, "dispatched", "partial_pending", "dispatched", "completed")

        rows = list(
            OrderStatusHistory.objects.filter(order=pending_order).order_by("created_at", "id")
        )
        assert [(r.old_status, r.new_status) for r in rows] == [
            (None, "pending"),
            ("pending", "dispatched"),
            ("dispatched", "partial_pending"),
            ("partial_pending", "dispatched"),
            ("dispatched", "completed"),
        ]
        assert all(r.user == sales_user for r in rows)

    def test_remarks_go_to_history_notes(self, pending_order, move):
        move(pending_order, "dispatched", remarks="first lot")
        last = OrderStatusHistory.objects.filter(order=pending_order).last()
        assert last.notes == "first lot"

    def test_outbox_events_written(self, pending_order, move):
        move(pending_order, "dispatched")
        types = list(
            OutboxEvent.objects.filter(aggregate_id=str(pending_order.id))
            .order_by("created_at", "id")
            .values_list("event_type", flat=True)
        )
        assert types == [
            "OrderCreated",
            "OrderDispatchAssigned",
            "OrderStatusChanged",
        ]

    def test_redispatch_does_not_repeat_assignment_event(self, pending_order, move):
        move(pending_order, "dispatched", "out_of_stock", "dispatched")
        assert (
            OutboxEvent.objects.filter(
                aggregate_id=str(pending_order.id), event_type="OrderDispatchAssigned"
            ).count()
            == 1
        )

    def test_cancel_from_completed(self, pending_order, move):
        move(pending_order, "dispatched", "completed", "cancelled")
        assert pending_order.status == "cancelled"


class TestRejectedTransitions:
    def test_pending_cannot_complete(self, pending_order, order_service, sales_user):
        before = _snapshot(pending_order)

        with pytest.raises(InvalidTransition) as exc_info:
            order_service.request_transition(
                pending_order.order_no, "completed", actor=sales_user
            )

        assert exc_info.value.current_status == "pending"
        assert exc_info.value.requested_status == "completed"
        assert exc_info.value.code == "invalid_transition"
        assert _snapshot(pending_order) == before

    def test_dispatched_cannot_be_invoiced_directly(
        self, pending_order, move, order_service, sales_user
    ):
        move(pending_order, "dispatched")
        before = _snapshot(pending_order)

        with pytest.raises(InvalidTransition):
            order_service.request_transition(
                pending_order.order_no, "invoiced", actor=sales_user, extra=INVOICE_EXTRA
            )

        assert _snapshot(pending_order) == before

    def test_graph_checked_before_fields(self, pending_order, order_service, sales_user):
        with pytest.raises(InvalidTransition):
            order_service.request_transition(pending_order.order_no, "invoiced", sales_user)

    @pytest.mark.parametrize("terminal", ["cancelled", "invoiced"])
    def test_terminal_states_reject_everything(
        self, terminal, pending_order, move, order_service, sales_user
    ):
        move(pending_order, "dispatched", "partial_pending", "short_closed")
        move(pending_order, terminal, **INVOICE_EXTRA)

        for target in ["pending", "dispatched", "cancelled", "invoiced", terminal]:
            with pytest.raises(InvalidTransition):
                order_service.request_transition(
                    pending_order.order_no, target, actor=sales_user, extra=INVOICE_EXTRA
                )

        pending_order.refresh_from_db()
        assert pending_order.status == terminal

    def test_unknown_order(self, order_service, sales_user):
        with pytest.raises(OrderNotFound):
            order_service.request_transition("NOPE", "dispatched", actor=sales_user)


class TestDispatchFields:
    @pytest.mark.parametrize("extra", [{}, {"dispatched_by": None}, {"dispatched_by": "  "}])
    def test_missing_dispatcher(self, extra, pending_order, order_service, sales_user):
        before = _snapshot(pending_order)

        with pytest.raises(MissingRequiredField) as exc_info:
            order_service.request_transition(
                pending_order.order_no, "dispatched", actor=sales_user, extra=extra
            )

        assert exc_info.value.field == "dispatched_by"
        assert _snapshot(pending_order) == before

    def test_unknown_dispatcher(self, pending_order, order_service, sales_user):
        with pytest.raises(UserNotFound) as exc_info:
            order_service.request_transition(
                pending_order.order_no,
                "dispatched",
                actor=sales_user,
                extra={"dispatched_by": 999999},
            )
        assert exc_info.value.context["field"] == "dispatched_by"
        pending_order.refresh_from_db()
        assert pending_order.status == "pending"


class TestInvoicing:
    @pytest.fixture()
    def short_closed(self, pending_order, move):
        move(pending_order, "dispatched", "partial_pending", "short_closed")
        return pending_order

    def test_invoice_from_short_closed(self, short_closed, order_service, sales_user):
        result = order_service.request_transition(
            short_closed.order_no, "invoiced", actor=sales_user, extra=INVOICE_EXTRA
        )

        short_closed.refresh_from_db()
        invoice = Invoice.objects.get()
        assert short_closed.status == "invoiced"
        assert short_closed.invoice_id == invoice.id
        assert result.invoice_id == invoice.id
        assert invoice.order_id == short_closed.id
        assert invoice.invoice_number == "INV-1"
        assert invoice.invoice_date == date(2025, 1, 1)
        assert invoice.billed_by == sales_user
        assert OutboxEvent.objects.filter(
            aggregate_id=str(short_closed.id), event_type="OrderInvoiced"
        ).exists()

    @pytest.mark.parametrize(
        "extra, missing",
        [
            ({}, "invoice_number"),
            ({"invoice_date": "2025-01-01"}, "invoice_number"),
            ({"invoice_number": "INV-1"}, "invoice_date"),
            ({"invoice_number": "", "invoice_date": "2025-01-01"}, "invoice_number"),
            ({"invoice_number": "INV-1", "invoice_date": None}, "invoice_date"),
        ],
    )
    def test_missing_invoice_fields(
        self, extra, missing, short_closed, order_service, sales_user
    ):
        before = _snapshot(short_closed)

        with pytest.raises(MissingRequiredField) as exc_info:
            order_service.request_transition(
                short_closed.order_no, "invoiced", actor=sales_user, extra=extra
            )

        assert exc_info.value.field == missing
        assert _snapshot(short_closed) == before

    @pytest.mark.parametrize("bad_date", ["01-01-2025", "2025-13-01", "tomorrow"])
    def test_malformed_invoice_date(self, bad_date, short_closed, order_service, sales_user):
        with pytest.raises(InvalidFieldValue) as exc_info:
            order_service.request_transition(
                short_closed.order_no,
                "invoiced",
                actor=sales_user,
                extra={"invoice_number": "INV-1", "invoice_date": bad_date},
            )
        assert exc_info.value.field == "invoice_date"
        assert Invoice.objects.count() == 0

    def test_duplicate_invoice_number_rolls_back(
        self, short_closed, make_order, move, order_service, sales_user
    ):
        other = make_order(order_no="PO-2002")
        move(other, "dispatched", "partial_pending", "short_closed")
        order_service.request_transition(
            other.order_no, "invoiced", actor=sales_user, extra=INVOICE_EXTRA
        )
        before = _snapshot(short_closed)

        with pytest.raises(DuplicateInvoiceNumber):
            order_service.request_transition(
                short_closed.order_no, "invoiced", actor=sales_user, extra=INVOICE_EXTRA
            )

        short_closed.refresh_from_db()
        assert short_closed.status == "short_closed"
        assert short_closed.invoice_id is None
        assert _snapshot(short_closed) == before
        assert Invoice.objects.count() == 1

    def test_links_invoice_issued_through_invoices_api(
        self, short_closed, order_service, sales_user
    ):
        issuer = InvoiceIssuer(InvoiceDjangoRepository(), OrderDjangoRepository())
        direct = issuer.issue(str(short_closed.id), "INV-D1", date(2025, 1, 2), sales_user)
        assert order_service.allowed_next_statuses(str(short_closed.id)).allowed == [
            "invoiced",
            "cancelled",
        ]

        result = order_service.request_transition(
            short_closed.order_no,
            "invoiced",
            actor=sales_user,
            extra={"invoice_number": "INV-D1", "invoice_date": "2025-01-02"},
        )

        short_closed.refresh_from_db()
        assert short_closed.status == "invoiced"
        assert short_closed.invoice_id == direct.id
        assert result.invoice_id == direct.id
        assert Invoice.objects.count() == 1

    def test_other_number_than_issued_invoice_is_rejected(
        self, short_closed, order_service, sales_user
    ):
        issuer = InvoiceIssuer(InvoiceDjangoRepository(), OrderDjangoRepository())
        issuer.issue(str(short_closed.id), "INV-D1", date(2025, 1, 2), sales_user)
        before = _snapshot(short_closed)

        with pytest.raises(InvoiceAlreadyIssued) as exc_info:
            order_service.request_transition(
                short_closed.order_no,
                "invoiced",
                actor=sales_user,
                extra={"invoice_number": "INV-D2", "invoice_date": "2025-01-02"},
            )

        assert exc_info.value.context["existing_invoice_number"] == "INV-D1"
        assert _snapshot(short_closed) == before
        short_closed.refresh_from_db()
        assert short_closed.invoice_id is None
