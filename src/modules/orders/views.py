"""Order API views.

Exposes ``OrderLifecycleService`` over HTTP using DRF ViewSets. Domain
exceptions are caught and translated into HTTP status codes with a typed
``code``; anything else propagates and DRF answers 500 after the
transaction has rolled back.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet, ViewSet

from modules.clients.exceptions import (
    ClientNotFound,
    ContactPersonNotFound,
    InactiveClient,
)
from modules.clients.views import build_client_service
from modules.core.responses import error_response, invalid_payload_response
from modules.invoices.exceptions import DuplicateInvoiceNumber, InvoiceAlreadyIssued
from modules.invoices.repositories import InvoiceDjangoRepository
from modules.invoices.services import InvoiceIssuer
from modules.orders.dtos import CreateOrderDTO, TransitionRequestDTO, UpdateOrderDTO
from modules.orders.exceptions import (
    DuplicateOrderNumber,
    OrderLifecycleError,
    OrderNotFound,
    UserNotFound,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories import OrderDjangoRepository, UserDjangoRepository
from modules.orders.serializers import (
    DispatcherSerializer,
    OrderListSerializer,
    OrderSerializer,
)
from modules.orders.services import OrderLifecycleService
from modules.sequences.exceptions import InvalidCompanyCode
from modules.sequences.repositories import CounterDjangoRepository
from modules.sequences.services import SequenceAllocator

NOT_FOUND = (OrderNotFound, UserNotFound, ClientNotFound, ContactPersonNotFound)
CONFLICT = (DuplicateOrderNumber, DuplicateInvoiceNumber, InvoiceAlreadyIssued)
BAD_REQUEST = (OrderLifecycleError, InactiveClient, InvalidCompanyCode)


def build_order_service() -> OrderLifecycleService:
    order_repo = OrderDjangoRepository()
    return OrderLifecycleService(
        order_repository=order_repo,
        user_repository=UserDjangoRepository(),
        sequence_allocator=SequenceAllocator(CounterDjangoRepository()),
        invoice_issuer=InvoiceIssuer(
            invoice_repository=InvoiceDjangoRepository(),
            order_repository=order_repo,
        ),
        client_service=build_client_service(),
    )


def domain_error_response(exc: Exception) -> Response:
    if isinstance(exc, NOT_FOUND):
        return error_response(exc, status.HTTP_404_NOT_FOUND)
    if isinstance(exc, CONFLICT):
        return error_response(exc, status.HTTP_409_CONFLICT)
    return error_response(exc, status.HTTP_400_BAD_REQUEST)


class OrderViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for sales orders.

    Uses ``OrderLifecycleService`` with injected collaborators (DIP).
    Does **not** extend ``ModelViewSet``; all writes go through the service.
    """

    queryset = Order.objects.all()
    serializer_class = OrderListSerializer
    filterset_class = OrderFilter
    search_fields = ["so_no", "order_no", "client__name"]
    ordering_fields = ["created_at", "so_date", "order_date", "status", "so_no"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_throttles(self) -> list[BaseThrottle]:
        """Per-action throttle scopes."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "by_so_no", "dispatch_queue"}:
            throttle_scope = "order_listing"
        elif self.action == "transition":
            throttle_scope = "order_transition"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        return self._service.list_orders()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        try:
            dto = CreateOrderDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return invalid_payload_response(exc)

        try:
            order = self._service.create_order(dto, actor=request.user)
        except (*NOT_FOUND, *CONFLICT, *BAD_REQUEST) as exc:
            return domain_error_response(exc)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # Retrieve / Update / Delete
    # ------------------------------------------------------------------

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk)
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    # so_no carries a slash in its fiscal postfix, e.g. SHHT-0001-25/26
    @action(detail=False, methods=["get"], url_path=r"by-so-no/(?P<so_no>.+)")
    def by_so_no(self, request: Request, so_no: str | None = None) -> Response:
        """GET /api/v1/orders/by-so-no/{so_no}/"""
        try:
            order = self._service.get_order_by_so_no(so_no)
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/orders/{pk}/

        ``so_no``, ``company``, ``status`` and ``invoice`` are ignored here;
        status moves go through ``POST /orders/transition/``.
        """
        try:
            dto = UpdateOrderDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return invalid_payload_response(exc)

        try:
            order = self._service.update_order(pk, dto)
        except (*NOT_FOUND, *CONFLICT, *BAD_REQUEST) as exc:
            return domain_error_response(exc)

        return Response(OrderSerializer(order).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/ returns the deleted order's last state."""
        try:
            snapshot = self._service.delete_order(pk)
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(snapshot, status=status.HTTP_200_OK)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @action(detail=True, methods=["get"], url_path="allowed-statuses")
    def allowed_statuses(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/allowed-statuses/"""
        try:
            result = self._service.allowed_next_statuses(pk)
        except OrderNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(result.model_dump(mode="json"))

    @action(detail=False, methods=["post"], url_path="transition")
    def transition(self, request: Request) -> Response:
        """POST /api/v1/orders/transition/

        Body: ``{"order_no", "status", "extra"}``.
        """
        try:
            dto = TransitionRequestDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return invalid_payload_response(exc)

        try:
            result = self._service.request_transition(
                order_no=dto.order_no,
                target_status=dto.status,
                actor=request.user,
                extra=dto.extra,
            )
        except (*NOT_FOUND, *CONFLICT, *BAD_REQUEST) as exc:
            return domain_error_response(exc)

        return Response(result.model_dump(mode="json"))

    @action(detail=False, methods=["get"], url_path="dispatch-queue")
    def dispatch_queue(self, request: Request) -> Response:
        """GET /api/v1/orders/dispatch-queue/?dispatched_by=<user id>

        Defaults to the requesting user.
        """
        user_id = request.query_params.get("dispatched_by") or request.user.pk
        try:
            queryset = self._service.dispatch_queue(user_id)
        except UserNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(OrderListSerializer(page, many=True).data)
        return Response(OrderListSerializer(queryset, many=True).data)


class DispatcherViewSet(ViewSet):
    """Members of the dispatch group with their open-order count."""

    def list(self, request: Request) -> Response:
        """GET /api/v1/dispatchers/"""
        rows = build_order_service().dispatcher_workload()
        serializer = DispatcherSerializer([row.model_dump() for row in rows], many=True)
        return Response(serializer.data)
