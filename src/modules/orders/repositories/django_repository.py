"""Django ORM implementation of the order repositories.

``save`` writes the aggregate's pending domain events to the outbox in the
same transaction as the order row. Status changes are guarded by
``select_for_update()``; there is no version column.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q, QuerySet

from modules.core.models import OutboxEvent
from modules.orders.constants import OPEN_STATES, OrderStatus
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository, IUserRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"

_RELATED = (
    "client",
    "client_contact_person",
    "initiated_by",
    "checked_by",
    "dispatched_by",
    "invoice",
)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _base_queryset(self) -> QuerySet:
        return Order.objects.select_related(*_RELATED).prefetch_related(
            "status_history"
        )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        order = Order(**data)
        order.save()
        logger.bind(order_id=str(order.id), so_no=order.so_no).info("order.inserted")
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        try:
            return self._base_queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_so_no(self, so_no: str) -> Optional[Order]:
        return self._base_queryset().filter(so_no=so_no).first()

    def get_for_update(self, id: str) -> Optional[Order]:
        # no select_related: FOR UPDATE on a nullable outer join is rejected
        # by PostgreSQL
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update_by_order_no(self, order_no: str) -> Optional[Order]:
        return Order.objects.select_for_update().filter(order_no=order_no).first()

    def order_no_exists(self, order_no: str, exclude_id: Optional[str] = None) -> bool:
        queryset = Order.objects.filter(order_no=order_no)
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = Order.objects.select_related(*_RELATED)
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def dispatch_queue(self, user_id: int) -> QuerySet:
        return (
            Order.objects.select_related(*_RELATED)
            .filter(dispatched_by_id=user_id, status=OrderStatus.DISPATCHED)
            .order_by("dispatched_date", "created_at")
        )

    # ------------------------------------------------------------------
    # Save / Delete
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist the order and flush its domain events to the outbox."""
        entity.save()

        events = entity.domain_events
        for event in events:
            OutboxEvent.objects.create(
                event_type=event.event_name,
                aggregate_id=str(event.aggregate_id),
                payload=event.to_payload(),
                topic=OUTBOX_TOPIC,
            )
        entity.clear_domain_events()

        logger.info("order.saved", order_id=str(entity.id), event_count=len(events))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Hard delete; history rows cascade, the invoice is kept."""
        try:
            deleted, _ = Order.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        if deleted:
            logger.info("order.deleted", order_id=str(id))
        return bool(deleted)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_history(
        self,
        order_id: Any,
        old_status: Optional[str],
        new_status: str,
        user: Any = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            user=user,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=new_status,
        )
        return history


class UserDjangoRepository(IUserRepository):
    def get_active(self, user_id: Any):
        if user_id is None or isinstance(user_id, bool):
            return None
        try:
            return get_user_model().objects.filter(pk=user_id, is_active=True).first()
        except (ValueError, TypeError, ValidationError):
            return None

    def dispatcher_workload(self, group_name: str) -> List[Dict[str, Any]]:
        users = (
            get_user_model()
            .objects.filter(groups__name=group_name, is_active=True)
            .annotate(
                open_orders=Count(
                    "orders_dispatched",
                    filter=Q(orders_dispatched__status__in=OPEN_STATES),
                )
            )
            .order_by("username")
        )
        return [
            {
                "user_id": user.pk,
                "username": user.get_username(),
                "full_name": user.get_full_name() or user.get_username(),
                "open_orders": user.open_orders,
            }
            for user in users
        ]
