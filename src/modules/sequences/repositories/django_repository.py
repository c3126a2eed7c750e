"""Django ORM implementation of the counter repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.sequences.models import Counter
from modules.sequences.repositories.interfaces import ICounterRepository

logger = structlog.get_logger(__name__)


class CounterDjangoRepository(ICounterRepository):
    def lock_or_create(self, prefix: str, postfix: str) -> Counter:
        # get_or_create retries the read after a unique-index race on insert,
        # so two first reservations still end up on one row.
        counter, created = Counter.objects.select_for_update().get_or_create(
            prefix=prefix,
            defaults={"number": 0, "postfix": postfix},
        )
        if created:
            logger.info("counter.created", prefix=prefix, postfix=postfix)
        return counter

    def get_by_prefix(self, prefix: str) -> Optional[Counter]:
        return Counter.objects.filter(prefix=prefix).first()

    def get_by_id(self, id: str) -> Optional[Counter]:
        try:
            return Counter.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Counter]:
        queryset = Counter.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Counter) -> Counter:
        entity.save()
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        counter = self.get_by_id(id)
        if not counter:
            return False
        counter.delete()
        logger.info("counter.deleted", counter_id=str(id), prefix=counter.prefix)
        return True
