"""Order repository contracts.

``IOrderRepository`` extends ``IRepository[Order]`` with the locked reads
the lifecycle needs, history writes and the dispatch queries.
``IUserRepository`` is the lifecycle's read-only view of ``auth.User``.
The service layer depends only on these (DIP).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser
    from django.db.models import QuerySet

    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Insert an order built from model field values (``so_no`` included)."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Order with relations and history preloaded."""

    @abstractmethod
    def get_by_so_no(self, so_no: str) -> Optional[Order]:
        ...

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Order by id with its row locked until the transaction ends."""

    @abstractmethod
    def get_for_update_by_order_no(self, order_no: str) -> Optional[Order]:
        """Order by external ``order_no`` with its row locked."""

    @abstractmethod
    def order_no_exists(self, order_no: str, exclude_id: Optional[str] = None) -> bool:
        ...

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        ...

    @abstractmethod
    def add_history(
        self,
        order_id: Any,
        old_status: Optional[str],
        new_status: str,
        user: Optional[AbstractBaseUser] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Append one row to the order's audit trail."""

    @abstractmethod
    def dispatch_queue(self, user_id: int) -> QuerySet:
        """Orders currently ``dispatched`` to *user_id*, oldest first."""


class IUserRepository(ABC):
    @abstractmethod
    def get_active(self, user_id: Any) -> Optional[AbstractBaseUser]:
        """Active user by primary key; ``None`` for unknown or malformed ids."""

    @abstractmethod
    def dispatcher_workload(self, group_name: str) -> List[Dict[str, Any]]:
        """``user_id``/``username``/``full_name``/``open_orders`` per group member."""
