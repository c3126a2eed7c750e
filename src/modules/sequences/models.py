"""Per-prefix document counter.

One row per company prefix, created lazily by the first reservation and
mutated under ``SELECT ... FOR UPDATE`` by ``SequenceAllocator.reserve``.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class Counter(BaseModel):
    prefix = models.CharField(max_length=32, unique=True)
    number = models.PositiveIntegerField(default=0)
    postfix = models.CharField(max_length=16)

    class Meta:
        db_table = "counters"
        ordering = ["prefix"]

    def __str__(self) -> str:
        return f"{self.prefix} #{self.number} ({self.postfix})"
