"""Invoice API views: list, retrieve and direct issue."""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.filters import OrderingFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.responses import error_response, invalid_payload_response
from modules.invoices.dtos import IssueInvoiceDTO
from modules.invoices.exceptions import (
    DuplicateInvoiceNumber,
    InvoiceAlreadyIssued,
    InvoiceNotFound,
)
from modules.invoices.filters import InvoiceFilter
from modules.invoices.models import Invoice
from modules.invoices.repositories import InvoiceDjangoRepository
from modules.invoices.serializers import InvoiceSerializer
from modules.invoices.services import InvoiceIssuer, InvoiceQueryService
from modules.orders.exceptions import OrderNotFound, UserNotFound
from modules.orders.repositories import OrderDjangoRepository


class InvoiceViewSet(ListModelMixin, GenericViewSet):
    """Issuing here does not move the order's status or link its invoice."""

    filterset_class = InvoiceFilter
    ordering_fields = ["invoice_date", "created_at", "invoice_number"]
    ordering = ["-invoice_date", "-created_at"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    queryset = Invoice.objects.all()
    serializer_class = InvoiceSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        invoice_repo = InvoiceDjangoRepository()
        self._issuer = InvoiceIssuer(
            invoice_repository=invoice_repo,
            order_repository=OrderDjangoRepository(),
        )
        self._queries = InvoiceQueryService(invoice_repository=invoice_repo)

    def get_queryset(self):
        return self._queries.list_invoices()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/invoices/{pk}/"""
        try:
            invoice = self._queries.get_invoice(pk)
        except InvoiceNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(InvoiceSerializer(invoice).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/invoices/"""
        try:
            dto = IssueInvoiceDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return invalid_payload_response(exc)

        try:
            billed_by = self._resolve_biller(dto.billed_by, request)
            invoice = self._issuer.issue(
                order_id=str(dto.order),
                invoice_number=dto.invoice_number,
                invoice_date=dto.invoice_date,
                billed_by=billed_by,
            )
        except (OrderNotFound, UserNotFound) as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except (DuplicateInvoiceNumber, InvoiceAlreadyIssued) as exc:
            return error_response(exc, status.HTTP_409_CONFLICT)

        invoice = self._queries.get_invoice(str(invoice.id))
        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    @staticmethod
    def _resolve_biller(user_id, request: Request):
        if user_id is None:
            return request.user
        user = get_user_model().objects.filter(pk=user_id, is_active=True).first()
        if user is None:
            raise UserNotFound(
                f"User {user_id} not found.", {"field": "billed_by", "user_id": user_id}
            )
        return user
