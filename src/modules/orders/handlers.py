"""Event handlers for order domain events.

Handlers run when the outbox relay publishes a stored event on the
in-process bus. They only record the event for now.
"""

from __future__ import annotations

import structlog

from modules.orders.events import (
    OrderCreated,
    OrderDispatchAssigned,
    OrderInvoiced,
    OrderStatusChanged,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            so_no=event.so_no,
            company=event.company,
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
            actor_id=event.actor_id,
        )


class OrderDispatchAssignedHandler(IEventHandler[OrderDispatchAssigned]):
    def handle(self, event: OrderDispatchAssigned) -> None:
        logger.info(
            "order.event.dispatch_assigned",
            order_id=str(event.aggregate_id),
            so_no=event.so_no,
            dispatched_by_id=event.dispatched_by_id,
        )


class OrderInvoicedHandler(IEventHandler[OrderInvoiced]):
    def handle(self, event: OrderInvoiced) -> None:
        logger.info(
            "order.event.invoiced",
            order_id=str(event.aggregate_id),
            invoice_id=event.invoice_id,
            invoice_number=event.invoice_number,
        )


order_created_handler = OrderCreatedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_dispatch_assigned_handler = OrderDispatchAssignedHandler()
order_invoiced_handler = OrderInvoicedHandler()
