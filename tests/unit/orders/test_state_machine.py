"""Unit tests for the order transition graph.

Covers:
- The full allowed-next table, in declaration order.
- Every pair outside the table is rejected by ``can_transition_to``.
- Terminal states allow nothing; unknown statuses allow nothing.
- Required extra fields per target status.
"""

from __future__ import annotations

import pytest

from modules.orders.constants import (
    OPEN_STATES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
    allowed_next,
    required_fields,
)
from modules.orders.models import Order

pytestmark = pytest.mark.unit

EXPECTED = {
    "pending": ["dispatched"],
    "dispatched": ["completed", "partial_pending", "out_of_stock"],
    "partial_pending": ["dispatched", "short_closed", "cancelled"],
    "out_of_stock": ["dispatched", "cancelled"],
    "short_closed": ["invoiced", "cancelled"],
    "completed": ["cancelled"],
    "invoiced": [],
    "cancelled": [],
}

ALL_PAIRS = [(a, b) for a in OrderStatus.values for b in OrderStatus.values]


class TestTransitionTable:
    def test_every_status_has_an_entry(self):
        assert {str(s) for s in VALID_TRANSITIONS} == set(OrderStatus.values)

    @pytest.mark.parametrize("current, expected", EXPECTED.items())
    def test_allowed_next_in_declaration_order(self, current, expected):
        assert [str(s) for s in allowed_next(current)] == expected

    @pytest.mark.parametrize("current, target", ALL_PAIRS)
    def test_can_transition_to_matches_table(self, current, target):
        order = Order(status=current)
        assert order.can_transition_to(target) is (target in EXPECTED[current])

    def test_unknown_status_allows_nothing(self):
        assert allowed_next("shipped") == ()
        assert Order(status="pending").can_transition_to("dispatch") is False

    @pytest.mark.parametrize("status", ["invoiced", "cancelled"])
    def test_terminal_states(self, status):
        order = Order(status=status)
        assert order.is_terminal
        assert order.allowed_next_statuses == ()
        assert status in TERMINAL_STATES

    def test_completed_is_not_terminal(self):
        assert not Order(status="completed").is_terminal

    def test_open_states_exclude_closed_ones(self):
        assert set(OPEN_STATES) == {
            "pending",
            "dispatched",
            "partial_pending",
            "out_of_stock",
            "short_closed",
        }


class TestRequiredFields:
    def test_dispatched_needs_dispatcher(self):
        assert required_fields("dispatched") == ("dispatched_by",)

    def test_invoiced_needs_number_then_date(self):
        assert required_fields(OrderStatus.INVOICED) == ("invoice_number", "invoice_date")

    @pytest.mark.parametrize(
        "status", ["completed", "partial_pending", "cancelled", "unknown"]
    )
    def test_other_targets_need_nothing(self, status):
        assert required_fields(status) == ()
