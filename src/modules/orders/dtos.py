"""Order DTOs for the Service Layer.

Pydantic v2 models between the DRF views and ``OrderLifecycleService``.
All DTOs are immutable (``frozen=True``).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.orders.constants import Company, OrderStatus

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Must not be blank.")
    return value


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    """Order creation request.

    ``status`` may be supplied and is stored as given; creation is not a
    transition, so the graph is not consulted.
    """

    model_config = ConfigDict(frozen=True)

    company: Company
    client_id: UUID
    client_contact_person_id: UUID
    order_no: str = Field(max_length=255)
    so_date: date
    order_date: date
    initiated_by: int
    checked_by: int
    dispatched_by: int
    status: OrderStatus = OrderStatus.PENDING
    drive_link: str = Field(default="", max_length=500)

    @field_validator("company", mode="before")
    @classmethod
    def normalize_company(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("order_no")
    @classmethod
    def order_no_not_blank(cls, v: str) -> str:
        return _strip_required(v)


class UpdateOrderDTO(BaseModel):
    """Full edit of an order; ``None`` leaves a field unchanged.

    ``so_no``, ``company``, ``status`` and ``invoice`` are not editable and
    are not part of this DTO.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    client_id: Optional[UUID] = None
    client_contact_person_id: Optional[UUID] = None
    order_no: Optional[str] = Field(default=None, max_length=255)
    so_date: Optional[date] = None
    order_date: Optional[date] = None
    initiated_by: Optional[int] = None
    checked_by: Optional[int] = None
    dispatched_by: Optional[int] = None
    drive_link: Optional[str] = Field(default=None, max_length=500)

    @field_validator("order_no")
    @classmethod
    def order_no_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _strip_required(v) if v is not None else v


class TransitionRequestDTO(BaseModel):
    """``order_no`` + target ``status`` + status-specific ``extra`` fields."""

    model_config = ConfigDict(frozen=True)

    order_no: str
    status: OrderStatus
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("order_no")
    @classmethod
    def order_no_not_blank(cls, v: str) -> str:
        return _strip_required(v)


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class TransitionResultDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    order_no: str
    previous_status: str
    status: str
    invoice_id: Optional[UUID] = None


class AllowedStatusesDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    current: str
    allowed: List[str]


class DispatcherWorkloadDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: int
    username: str
    full_name: str
    open_orders: int


class StatusHistoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    old_status: Optional[str]
    new_status: str
    user_id: Optional[int]
    notes: str
    created_at: datetime

    @classmethod
    def from_entity(cls, history: OrderStatusHistory) -> StatusHistoryDTO:
        return cls(
            id=history.id,
            old_status=history.old_status,
            new_status=history.new_status,
            user_id=history.user_id,
            notes=history.notes,
            created_at=history.created_at,
        )


class OrderOutputDTO(BaseModel):
    """Full state of an order; also the snapshot returned on delete."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    company: str
    so_no: str
    order_no: str
    so_date: date
    order_date: date
    status: str
    client_id: UUID
    client_contact_person_id: UUID
    initiated_by_id: int
    checked_by_id: int
    dispatched_by_id: int
    invoice_id: Optional[UUID]
    drive_link: str
    dispatched_date: Optional[date]
    dispatch_remarks: str
    created_at: datetime
    updated_at: datetime
    history: List[StatusHistoryDTO]

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        """Assumes ``status_history`` is prefetched."""
        return cls(
            id=order.id,
            company=order.company,
            so_no=order.so_no,
            order_no=order.order_no,
            so_date=order.so_date,
            order_date=order.order_date,
            status=order.status,
            client_id=order.client_id,
            client_contact_person_id=order.client_contact_person_id,
            initiated_by_id=order.initiated_by_id,
            checked_by_id=order.checked_by_id,
            dispatched_by_id=order.dispatched_by_id,
            invoice_id=order.invoice_id,
            drive_link=order.drive_link,
            dispatched_date=order.dispatched_date,
            dispatch_remarks=order.dispatch_remarks,
            created_at=order.created_at,
            updated_at=order.updated_at,
            history=[StatusHistoryDTO.from_entity(h) for h in order.status_history.all()],
        )
