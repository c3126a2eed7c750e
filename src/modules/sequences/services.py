"""Sales-order number allocation and counter administration.

``SequenceAllocator.reserve`` is the only code path that advances a
counter during normal operation. It joins the caller's transaction: when
order creation rolls back, the increment rolls back with it, so every
committed ``so_no`` is unique and numbers only skip if a counter is edited
by hand.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import IntegrityError, transaction
from django.utils import timezone

from modules.sequences.dtos import ReservedNumber
from modules.sequences.exceptions import (
    CounterNotFound,
    DuplicateCounterPrefix,
    InvalidCompanyCode,
)
from modules.sequences.models import Counter

if TYPE_CHECKING:
    from modules.sequences.dtos import CounterDTO, UpdateCounterDTO
    from modules.sequences.repositories.interfaces import ICounterRepository

logger = structlog.get_logger(__name__)


def fiscal_postfix(today: date) -> str:
    """``"25/26"`` for any date in 2025; ``"99/00"`` for 2099."""
    yy = today.year % 100
    return f"{yy:02d}/{(yy + 1) % 100:02d}"


def format_so_no(prefix: str, number: int, postfix: str) -> str:
    return f"{prefix}-{number:04d}-{postfix}"


def normalize_prefix(company_code: str) -> str:
    prefix = (company_code or "").strip().upper()
    if not prefix:
        raise InvalidCompanyCode(
            "Company code must not be blank.", {"company": company_code}
        )
    return prefix


class SequenceAllocator:
    """Mints ``{PREFIX}-{NNNN}-{YY/YY+1}`` numbers, one counter per prefix."""

    def __init__(self, counter_repository: ICounterRepository) -> None:
        self._repo = counter_repository

    @transaction.atomic
    def reserve(self, company_code: str, today: Optional[date] = None) -> ReservedNumber:
        """Reserve the next number for *company_code*.

        The counter row stays locked until the enclosing transaction ends,
        which serializes concurrent reservations for the same prefix.
        Different prefixes never contend.
        """
        prefix = normalize_prefix(company_code)
        postfix = fiscal_postfix(today or timezone.localdate())

        counter = self._repo.lock_or_create(prefix, postfix)
        if counter.postfix != postfix:
            logger.info(
                "counter.postfix_rolled_over",
                prefix=prefix,
                old_postfix=counter.postfix,
                new_postfix=postfix,
            )
            counter.postfix = postfix
        counter.number += 1
        self._repo.save(counter)

        reserved = ReservedNumber(
            prefix=prefix,
            number=counter.number,
            postfix=postfix,
            so_no=format_so_no(prefix, counter.number, postfix),
        )
        logger.info("counter.reserved", prefix=prefix, number=reserved.number)
        return reserved


class CounterService:
    """Administrative CRUD over counters, outside the allocation path."""

    def __init__(self, counter_repository: ICounterRepository) -> None:
        self._repo = counter_repository

    def get_counter(self, id: str) -> Counter:
        counter = self._repo.get_by_id(id)
        if not counter:
            raise CounterNotFound(f"Counter {id} not found.", {"counter_id": str(id)})
        return counter

    def list_counters(self, filters: Optional[Dict[str, Any]] = None) -> List[Counter]:
        return self._repo.list(filters)

    @transaction.atomic
    def create_counter(self, dto: CounterDTO) -> Counter:
        if self._repo.get_by_prefix(dto.prefix):
            raise DuplicateCounterPrefix(
                f"Counter for prefix {dto.prefix} already exists.",
                {"prefix": dto.prefix},
            )
        counter = self._save_unique(
            Counter(prefix=dto.prefix, number=dto.number, postfix=dto.postfix)
        )
        logger.info("counter.created", prefix=counter.prefix, number=counter.number)
        return counter

    @transaction.atomic
    def update_counter(self, id: str, dto: UpdateCounterDTO) -> Counter:
        counter = self.get_counter(id)
        changes = dto.model_dump(exclude_none=True)
        new_prefix = changes.get("prefix")
        if new_prefix and new_prefix != counter.prefix:
            if self._repo.get_by_prefix(new_prefix):
                raise DuplicateCounterPrefix(
                    f"Counter for prefix {new_prefix} already exists.",
                    {"prefix": new_prefix},
                )
        for field, value in changes.items():
            setattr(counter, field, value)
        counter = self._save_unique(counter)
        logger.warning(
            "counter.manually_updated",
            counter_id=str(counter.id),
            prefix=counter.prefix,
            number=counter.number,
        )
        return counter

    @transaction.atomic
    def delete_counter(self, id: str) -> None:
        if not self._repo.delete(id):
            raise CounterNotFound(f"Counter {id} not found.", {"counter_id": str(id)})

    def _save_unique(self, counter: Counter) -> Counter:
        try:
            with transaction.atomic():
                return self._repo.save(counter)
        except IntegrityError as exc:
            raise DuplicateCounterPrefix(
                f"Counter for prefix {counter.prefix} already exists.",
                {"prefix": counter.prefix},
            ) from exc
