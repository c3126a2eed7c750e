"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    so_no: str = ""
    order_no: str = ""
    company: str = ""
    status: str = ""


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    old_status: str = ""
    new_status: str = ""
    actor_id: Optional[int] = None


@dataclass(frozen=True)
class OrderDispatchAssigned(DomainEvent):
    """A pending order was handed to a dispatcher; the notification hook."""

    so_no: str = ""
    order_no: str = ""
    dispatched_by_id: Optional[int] = None


@dataclass(frozen=True)
class OrderInvoiced(DomainEvent):
    invoice_id: str = ""
    invoice_number: str = ""
