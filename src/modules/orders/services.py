"""Order lifecycle service (Use Cases).

``OrderLifecycleService`` owns the sales-order state machine and every
write to an order. Each command runs in one ``transaction.atomic`` block:

- ``create_order`` reserves a ``so_no`` from ``SequenceAllocator`` and
  inserts the order in the same transaction, so a failed insert also
  undoes the counter increment.
- ``request_transition`` locks the order row by ``order_no``, checks the
  target against ``VALID_TRANSITIONS`` for the *locked* status, applies the
  per-status side effects and writes status, history and outbox events.
  Moving to ``invoiced`` calls ``InvoiceIssuer`` inside the same
  transaction and links the result, which may be an invoice issued earlier
  through the invoices API; if issuing fails nothing is written.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

import structlog
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from modules.orders.constants import (
    DISPATCH_GROUP,
    OrderStatus,
    allowed_next,
    required_fields,
)
from modules.orders.dtos import (
    AllowedStatusesDTO,
    DispatcherWorkloadDTO,
    OrderOutputDTO,
    TransitionResultDTO,
)
from modules.orders.events import (
    OrderCreated,
    OrderDispatchAssigned,
    OrderInvoiced,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    DuplicateOrderNumber,
    InvalidFieldValue,
    InvalidTransition,
    MissingRequiredField,
    OrderNotFound,
    UserNotFound,
)

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.clients.services import ClientService
    from modules.invoices.services import InvoiceIssuer
    from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository, IUserRepository
    from modules.sequences.services import SequenceAllocator

logger = structlog.get_logger(__name__)

USER_FIELDS = ("initiated_by", "checked_by", "dispatched_by")


class OrderLifecycleService:
    """Application service for sales orders.

    Collaborators arrive by constructor injection (DIP): the order and user
    repositories, the sequence allocator, the invoice issuer and the client
    service that validates client / contact pairs.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        user_repository: IUserRepository,
        sequence_allocator: SequenceAllocator,
        invoice_issuer: InvoiceIssuer,
        client_service: ClientService,
    ) -> None:
        self._order_repo = order_repository
        self._user_repo = user_repository
        self._allocator = sequence_allocator
        self._issuer = invoice_issuer
        self._clients = client_service

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO, actor: Any = None) -> Order:
        """Create an order with a freshly reserved ``so_no``.

        Raises:
            ClientNotFound / InactiveClient / ContactPersonNotFound: bad
                client or contact reference.
            UserNotFound: one of the three user roles does not resolve.
            DuplicateOrderNumber: ``order_no`` is already used.
        """
        log = logger.bind(company=str(dto.company), order_no=dto.order_no)
        log.info("order.creation_started")

        client, contact = self._clients.resolve_order_parties(
            str(dto.client_id), str(dto.client_contact_person_id)
        )
        users = {field: self._resolve_user(getattr(dto, field), field) for field in USER_FIELDS}

        if self._order_repo.order_no_exists(dto.order_no):
            log.warning("order.duplicate_order_no")
            raise DuplicateOrderNumber(dto.order_no)

        reserved = self._allocator.reserve(dto.company)

        try:
            with transaction.atomic():
                order = self._order_repo.create(
                    {
                        "company": reserved.prefix,
                        "so_no": reserved.so_no,
                        "order_no": dto.order_no,
                        "so_date": dto.so_date,
                        "order_date": dto.order_date,
                        "status": dto.status,
                        "client": client,
                        "client_contact_person": contact,
                        "drive_link": dto.drive_link,
                        **users,
                    }
                )
        except IntegrityError as exc:
            # order_no taken by a concurrent request after the check above
            log.warning("order.insert_conflict")
            raise DuplicateOrderNumber(dto.order_no) from exc

        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                so_no=order.so_no,
                order_no=order.order_no,
                company=order.company,
                status=str(order.status),
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            old_status=None,
            new_status=order.status,
            user=actor,
            notes="Order created",
        )

        log.info("order.created", order_id=str(order.id), so_no=order.so_no)
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def request_transition(
        self,
        order_no: str,
        target_status: str,
        actor: Any,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> TransitionResultDTO:
        """Move the order identified by *order_no* to *target_status*.

        ``dispatched`` needs ``extra["dispatched_by"]``; ``invoiced`` needs
        ``extra["invoice_number"]`` and ``extra["invoice_date"]``.

        Raises:
            OrderNotFound: no order with *order_no*.
            InvalidTransition: target not allowed from the current status.
            MissingRequiredField: a required extra field is absent or blank.
            InvalidFieldValue: ``invoice_date`` is not a date.
            UserNotFound: ``dispatched_by`` does not resolve to a user.
            DuplicateInvoiceNumber: the invoice number belongs to another order.
            InvoiceAlreadyIssued: the order already has an invoice with a
                different number.
        """
        extra = dict(extra or {})
        target_status = str(target_status)

        order = self._order_repo.get_for_update_by_order_no(order_no)
        if not order:
            raise OrderNotFound(f"Order {order_no} not found.", {"order_no": order_no})

        current = str(order.status)
        log = logger.bind(
            order_id=str(order.id),
            order_no=order_no,
            current_status=current,
            requested_status=target_status,
        )

        if not order.can_transition_to(target_status):
            log.warning("order.invalid_transition")
            raise InvalidTransition(current, target_status)

        for field in required_fields(target_status):
            if _is_blank(extra.get(field)):
                log.warning("order.missing_required_field", field=field)
                raise MissingRequiredField(field, target_status)

        invoice = None
        if target_status == OrderStatus.DISPATCHED:
            self._apply_dispatch(order, current, actor, extra)
        elif target_status == OrderStatus.INVOICED:
            invoice = self._issuer.issue_or_reuse(
                order_id=str(order.id),
                invoice_number=str(extra["invoice_number"]).strip(),
                invoice_date=_parse_date_field("invoice_date", extra["invoice_date"]),
                billed_by=actor,
            )
            order.invoice = invoice
            order.add_domain_event(
                OrderInvoiced(
                    aggregate_id=order.id,
                    invoice_id=str(invoice.id),
                    invoice_number=invoice.invoice_number,
                )
            )

        order.status = target_status
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=current,
                new_status=target_status,
                actor_id=getattr(actor, "pk", None),
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            old_status=current,
            new_status=target_status,
            user=actor,
            notes=str(extra.get("remarks") or ""),
        )

        log.info("order.transitioned")
        return TransitionResultDTO(
            order_id=order.id,
            order_no=order.order_no,
            previous_status=current,
            status=target_status,
            invoice_id=invoice.id if invoice else None,
        )

    @transaction.atomic
    def update_order(self, order_id: str, dto: UpdateOrderDTO) -> Order:
        """Full edit of an order's editable fields.

        ``order_no`` stays unique (the order itself excluded). A new contact
        person must belong to the order's (possibly new) client.
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.", {"order_id": str(order_id)})

        log = logger.bind(order_id=str(order.id))
        changes = dto.model_dump(exclude_none=True)

        new_order_no = changes.pop("order_no", None)
        if new_order_no is not None and new_order_no != order.order_no:
            if self._order_repo.order_no_exists(new_order_no, exclude_id=str(order.id)):
                log.warning("order.duplicate_order_no", order_no=new_order_no)
                raise DuplicateOrderNumber(new_order_no)
            order.order_no = new_order_no

        client_id = changes.pop("client_id", None)
        contact_id = changes.pop("client_contact_person_id", None)
        if client_id is not None or contact_id is not None:
            client, contact = self._clients.resolve_order_parties(
                str(client_id or order.client_id),
                str(contact_id or order.client_contact_person_id),
            )
            order.client = client
            order.client_contact_person = contact

        for field in USER_FIELDS:
            if field in changes:
                setattr(order, field, self._resolve_user(changes.pop(field), field))

        for field, value in changes.items():
            setattr(order, field, value)

        try:
            with transaction.atomic():
                self._order_repo.save(order)
        except IntegrityError as exc:
            raise DuplicateOrderNumber(order.order_no) from exc

        log.info("order.updated")
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def delete_order(self, order_id: str) -> Dict[str, Any]:
        """Hard-delete an order in any status and return its last state."""
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.", {"order_id": str(order_id)})

        snapshot = OrderOutputDTO.from_entity(order).model_dump(mode="json")
        self._order_repo.delete(str(order.id))
        logger.info(
            "order.deleted_with_snapshot",
            order_id=str(order.id),
            so_no=order.so_no,
            status=str(order.status),
        )
        return snapshot

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def allowed_next_statuses(self, order_id: str) -> AllowedStatusesDTO:
        order = self.get_order(order_id)
        return AllowedStatusesDTO(
            order_id=order.id,
            current=str(order.status),
            allowed=[str(s) for s in allowed_next(order.status)],
        )

    def get_order(self, order_id: str) -> Order:
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.", {"order_id": str(order_id)})
        return order

    def get_order_by_so_no(self, so_no: str) -> Order:
        order = self._order_repo.get_by_so_no(so_no)
        if not order:
            raise OrderNotFound(f"Order {so_no} not found.", {"so_no": so_no})
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        return self._order_repo.list(filters)

    def dispatch_queue(self, user_id: Any) -> QuerySet:
        """Orders a dispatcher currently has in ``dispatched`` status."""
        user = self._resolve_user(user_id, "dispatched_by")
        return self._order_repo.dispatch_queue(user.pk)

    def dispatcher_workload(self) -> List[DispatcherWorkloadDTO]:
        return [
            DispatcherWorkloadDTO(**row)
            for row in self._user_repo.dispatcher_workload(DISPATCH_GROUP)
        ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _apply_dispatch(
        self, order: Order, current: str, actor: Any, extra: Dict[str, Any]
    ) -> None:
        dispatcher = self._resolve_user(extra["dispatched_by"], "dispatched_by")
        order.dispatched_by = dispatcher
        if actor is not None:
            order.initiated_by = actor
        order.dispatched_date = timezone.localdate()
        if extra.get("dispatch_remarks") is not None:
            order.dispatch_remarks = str(extra["dispatch_remarks"])
        if extra.get("drive_link"):
            order.drive_link = str(extra["drive_link"])

        if current == OrderStatus.PENDING:
            order.add_domain_event(
                OrderDispatchAssigned(
                    aggregate_id=order.id,
                    so_no=order.so_no,
                    order_no=order.order_no,
                    dispatched_by_id=dispatcher.pk,
                )
            )

    def _resolve_user(self, user_id: Any, field: str):
        user = self._user_repo.get_active(user_id)
        if user is None:
            raise UserNotFound(
                f"User {user_id} not found.",
                {"field": field, "user_id": str(user_id)},
            )
        return user


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_date_field(field: str, value: Any) -> date:
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value).strip())
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidFieldValue(field, value, "expected YYYY-MM-DD")
    return parsed
