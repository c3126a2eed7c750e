"""Concurrency integration tests.

Proves that the row locks in ``SequenceAllocator.reserve`` and
``OrderLifecycleService.request_transition`` serialize concurrent callers.

Scenarios:
- N threads reserve numbers for one prefix: the numbers are exactly
  1..N with no duplicates.
- Two threads invoice the same short_closed order with different invoice
  numbers: exactly one wins, one invoice row exists.

Uses ``TransactionTestCase`` so each thread sees committed data. On
PostgreSQL / MySQL the row locks do the serializing; the SQLite test database
runs transactions as ``BEGIN IMMEDIATE``, which queues writers the same way.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date

import django
from django.contrib.auth import get_user_model
from django.test import TransactionTestCase

from modules.clients.models import Client, ContactPerson
from modules.invoices.models import Invoice
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.orders.views import build_order_service
from modules.sequences.models import Counter
from modules.sequences.repositories import CounterDjangoRepository
from modules.sequences.services import SequenceAllocator

NUM_WORKERS = 8


class TestSequenceConcurrency(TransactionTestCase):
    def _reserve_in_thread(self, _: int) -> int:
        try:
            return SequenceAllocator(CounterDjangoRepository()).reserve("SHAPL").number
        finally:
            django.db.connections.close_all()

    def test_concurrent_reservations_never_collide(self):
        with ThreadPoolExecutor(max_workers=NUM_WORKERS) as pool:
            numbers = list(pool.map(self._reserve_in_thread, range(NUM_WORKERS)))

        assert sorted(numbers) == list(range(1, NUM_WORKERS + 1))
        assert Counter.objects.get(prefix="SHAPL").number == NUM_WORKERS

    def test_two_reservations_are_consecutive(self):
        Counter.objects.create(prefix="SHAPL", number=10, postfix="25/26")

        with ThreadPoolExecutor(max_workers=2) as pool:
            pair = set(pool.map(self._reserve_in_thread, range(2)))

        assert pair == {11, 12}


class TestInvoiceConcurrency(TransactionTestCase):
    def setUp(self):
        User = get_user_model()
        self.user = User.objects.create_user("race-user")
        client = Client.objects.create(
            name="Race Client", city="Pune", state="Maharashtra", pincode="411001"
        )
        contact = ContactPerson.objects.create(
            client=client, name="Racer", mobile="9876543210"
        )
        self.order = Order.objects.create(
            company="SHHT",
            so_no="SHHT-0001-25/26",
            order_no="PO-RACE",
            so_date=date(2025, 1, 1),
            order_date=date(2025, 1, 1),
            status=OrderStatus.SHORT_CLOSED,
            client=client,
            client_contact_person=contact,
            initiated_by=self.user,
            checked_by=self.user,
            dispatched_by=self.user,
        )

    def _invoice_in_thread(self, n: int) -> str:
        try:
            build_order_service().request_transition(
                "PO-RACE",
                "invoiced",
                actor=self.user,
                extra={"invoice_number": f"INV-R{n}", "invoice_date": "2025-01-05"},
            )
            return "ok"
        except Exception as exc:
            return type(exc).__name__
        finally:
            django.db.connections.close_all()

    def test_only_one_invoice_wins(self):
        with ThreadPoolExecutor(max_workers=2) as pool:
            outcomes = list(pool.map(self._invoice_in_thread, range(2)))

        assert sorted(outcomes) == ["InvalidTransition", "ok"]
        assert Invoice.objects.count() == 1
        self.order.refresh_from_db()
        assert self.order.status == "invoiced"
        assert self.order.invoice_id == Invoice.objects.get().id
