"""Unit tests for SequenceAllocator.

Covers:
- First reservation for an unknown prefix creates the counter at 1.
- Prefix normalisation (strip + upper-case) and blank codes.
- Strictly increasing numbers per prefix; prefixes are independent.
- Postfix roll-over when the calendar year changes (number keeps counting).
- Reservation rolls back with the caller's transaction.
"""

from __future__ import annotations

from datetime import date

import pytest
from django.db import transaction
from django.utils import timezone
from freezegun import freeze_time

from modules.sequences.exceptions import InvalidCompanyCode
from modules.sequences.models import Counter
from modules.sequences.repositories import CounterDjangoRepository
from modules.sequences.services import (
    SequenceAllocator,
    fiscal_postfix,
    format_so_no,
    normalize_prefix,
)

pytestmark = pytest.mark.unit


@pytest.fixture()
def allocator():
    return SequenceAllocator(CounterDjangoRepository())


class TestHelpers:
    @pytest.mark.parametrize(
        "today, expected",
        [
            (date(2025, 1, 1), "25/26"),
            (date(2025, 12, 31), "25/26"),
            (date(2009, 7, 4), "09/10"),
            (date(2099, 3, 1), "99/00"),
        ],
    )
    def test_fiscal_postfix(self, today, expected):
        assert fiscal_postfix(today) == expected

    def test_format_so_no_pads_to_four_digits(self):
        assert format_so_no("SHHT", 7, "25/26") == "SHHT-0007-25/26"

    def test_format_so_no_keeps_wider_numbers(self):
        assert format_so_no("SHHT", 12345, "25/26") == "SHHT-12345-25/26"

    def test_normalize_prefix(self):
        assert normalize_prefix("  shapl ") == "SHAPL"

    @pytest.mark.parametrize("code", ["", "   ", None])
    def test_normalize_prefix_rejects_blank(self, code):
        with pytest.raises(InvalidCompanyCode):
            normalize_prefix(code)


class TestReserve:
    def test_first_reservation_starts_at_one(self, allocator):
        yy = timezone.localdate().year % 100

        reserved = allocator.reserve("shht")

        assert reserved.prefix == "SHHT"
        assert reserved.number == 1
        assert reserved.so_no == f"SHHT-0001-{yy:02d}/{(yy + 1) % 100:02d}"
        counter = Counter.objects.get(prefix="SHHT")
        assert counter.number == 1
        assert counter.postfix == reserved.postfix

    def test_numbers_increase_by_one(self, allocator):
        numbers = [allocator.reserve("SHHT").number for _ in range(5)]
        assert numbers == [1, 2, 3, 4, 5]

    def test_prefixes_are_independent(self, allocator):
        allocator.reserve("SHHT")
        allocator.reserve("SHHT")

        reserved = allocator.reserve("SHAPN")

        assert reserved.number == 1
        assert Counter.objects.get(prefix="SHHT").number == 2

    def test_continues_from_existing_counter(self, allocator):
        Counter.objects.create(prefix="SHAPL", number=41, postfix="25/26")

        reserved = allocator.reserve("SHAPL", today=date(2025, 8, 1))

        assert reserved.number == 42
        assert reserved.so_no == "SHAPL-0042-25/26"

    def test_blank_code_creates_nothing(self, allocator):
        with pytest.raises(InvalidCompanyCode):
            allocator.reserve("  ")
        assert Counter.objects.count() == 0

    def test_explicit_date_sets_postfix(self, allocator):
        reserved = allocator.reserve("SHHT", today=date(2030, 2, 2))
        assert reserved.postfix == "30/31"


class TestPostfixRollover:
    def test_postfix_updates_when_year_changes(self, allocator):
        with freeze_time("2025-12-31 06:00:00"):
            first = allocator.reserve("SHHT")
        with freeze_time("2026-01-01 06:00:00"):
            second = allocator.reserve("SHHT")

        assert first.so_no == "SHHT-0001-25/26"
        assert second.so_no == "SHHT-0002-26/27"
        assert Counter.objects.get(prefix="SHHT").postfix == "26/27"

    def test_stale_postfix_is_overwritten(self, allocator):
        Counter.objects.create(prefix="SHHT", number=9, postfix="24/25")

        reserved = allocator.reserve("SHHT", today=date(2025, 4, 1))

        assert reserved.number == 10
        assert reserved.postfix == "25/26"


class TestTransactionScope:
    def test_rolled_back_reservation_is_not_kept(self, allocator):
        allocator.reserve("SHHT")

        with pytest.raises(RuntimeError):
            with transaction.atomic():
                allocator.reserve("SHHT")
                raise RuntimeError("order insert failed")

        assert Counter.objects.get(prefix="SHHT").number == 1
        assert allocator.reserve("SHHT").number == 2
