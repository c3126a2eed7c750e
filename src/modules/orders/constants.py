"""Order domain constants.

``VALID_TRANSITIONS`` is the single transition graph for sales orders. The
allowed-next tuples are in declaration order, which is the order the API
reports them in.
"""

from django.db import models


class Company(models.TextChoices):
    SHHT = "SHHT", "SHHT"
    SHAPL = "SHAPL", "SHAPL"
    SHAPN = "SHAPN", "SHAPN"


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    DISPATCHED = "dispatched", "Dispatched"
    PARTIAL_PENDING = "partial_pending", "Partial pending"
    OUT_OF_STOCK = "out_of_stock", "Out of stock"
    SHORT_CLOSED = "short_closed", "Short closed"
    INVOICED = "invoiced", "Invoiced"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


VALID_TRANSITIONS: dict[str, tuple[str, ...]] = {
    OrderStatus.PENDING: (OrderStatus.DISPATCHED,),
    OrderStatus.DISPATCHED: (
        OrderStatus.COMPLETED,
        OrderStatus.PARTIAL_PENDING,
        OrderStatus.OUT_OF_STOCK,
    ),
    OrderStatus.PARTIAL_PENDING: (
        OrderStatus.DISPATCHED,
        OrderStatus.SHORT_CLOSED,
        OrderStatus.CANCELLED,
    ),
    OrderStatus.OUT_OF_STOCK: (OrderStatus.DISPATCHED, OrderStatus.CANCELLED),
    OrderStatus.SHORT_CLOSED: (OrderStatus.INVOICED, OrderStatus.CANCELLED),
    OrderStatus.COMPLETED: (OrderStatus.CANCELLED,),
    OrderStatus.INVOICED: (),
    OrderStatus.CANCELLED: (),
}

TERMINAL_STATES: tuple[str, ...] = (OrderStatus.INVOICED, OrderStatus.CANCELLED)

# Orders in these states no longer count towards a dispatcher's workload.
CLOSED_STATES: tuple[str, ...] = (
    OrderStatus.COMPLETED,
    OrderStatus.INVOICED,
    OrderStatus.CANCELLED,
)
OPEN_STATES: tuple[str, ...] = tuple(
    s for s in OrderStatus.values if s not in CLOSED_STATES
)

# Extra fields a transition into the key status must carry, checked in order.
TRANSITION_REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    OrderStatus.DISPATCHED: ("dispatched_by",),
    OrderStatus.INVOICED: ("invoice_number", "invoice_date"),
}

DISPATCH_GROUP = "dispatch"


def allowed_next(status: str) -> tuple[str, ...]:
    """Statuses reachable from *status* in one step; ``()`` for unknown ones."""
    try:
        return VALID_TRANSITIONS[OrderStatus(status)]
    except ValueError:
        return ()


def required_fields(status: str) -> tuple[str, ...]:
    try:
        return TRANSITION_REQUIRED_FIELDS.get(OrderStatus(status), ())
    except ValueError:
        return ()
