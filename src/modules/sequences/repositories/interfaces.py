"""Counter repository contract."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.sequences.models import Counter


class ICounterRepository(IRepository["Counter"]):
    @abstractmethod
    def lock_or_create(self, prefix: str, postfix: str) -> Counter:
        """Return the row for *prefix* locked for update, inserting it
        (``number=0``, *postfix*) when absent. Must run inside a transaction.
        """

    @abstractmethod
    def get_by_prefix(self, prefix: str) -> Optional[Counter]:
        """Unlocked read."""
