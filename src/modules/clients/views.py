"""Client and contact-person API views.

Both viewsets go through ``ClientService``; domain exceptions become 404s
and Pydantic validation errors become 400s.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.clients.dtos import ContactPersonDTO, CreateClientDTO, UpdateClientDTO
from modules.clients.exceptions import ClientNotFound, ContactPersonNotFound
from modules.clients.filters import ClientFilter, ContactPersonFilter
from modules.clients.models import Client, ContactPerson
from modules.clients.repositories import (
    ClientDjangoRepository,
    ContactPersonDjangoRepository,
)
from modules.clients.serializers import ClientSerializer, ContactPersonSerializer
from modules.clients.services import ClientService
from modules.core.responses import error_response, invalid_payload_response


def build_client_service() -> ClientService:
    return ClientService(
        client_repository=ClientDjangoRepository(),
        contact_repository=ContactPersonDjangoRepository(),
    )


class ClientViewSet(ListModelMixin, GenericViewSet):
    filterset_class = ClientFilter
    search_fields = ["name", "city"]
    ordering_fields = ["name", "created_at"]
    ordering = ["name"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Client.objects.alive()
    serializer_class = ClientSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_client_service()

    def get_queryset(self):
        return Client.objects.alive().prefetch_related("contact_persons")

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/clients/{pk}/"""
        try:
            client = self._service.get_client(pk)
        except ClientNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(ClientSerializer(client).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/clients/ (optionally with ``contact_persons``)"""
        try:
            dto = CreateClientDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return invalid_payload_response(exc)
        client = self._service.create_client(dto)
        return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/clients/{pk}/"""
        try:
            dto = UpdateClientDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return invalid_payload_response(exc)
        try:
            client = self._service.update_client(pk, dto)
        except ClientNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(ClientSerializer(client).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/clients/{pk}/ (archives the client)"""
        try:
            self._service.delete_client(pk)
        except ClientNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ContactPersonViewSet(ListModelMixin, GenericViewSet):
    filterset_class = ContactPersonFilter
    search_fields = ["name"]
    ordering_fields = ["name", "created_at"]
    ordering = ["name"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = ContactPerson.objects.alive()
    serializer_class = ContactPersonSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_client_service()

    def get_queryset(self):
        return ContactPerson.objects.alive().select_related("client")

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            contact = self._service.get_contact_person(pk)
        except ContactPersonNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(ContactPersonSerializer(contact).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/contact-persons/ with ``client`` plus contact fields"""
        data = {k: v for k, v in request.data.items() if k != "client"}
        client_id = request.data.get("client")
        try:
            dto = ContactPersonDTO.model_validate(data)
        except (PydanticValidationError, ValueError) as exc:
            return invalid_payload_response(exc)
        try:
            contact = self._service.add_contact_person(client_id, dto)
        except ClientNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(
            ContactPersonSerializer(contact).data, status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        data = {k: v for k, v in request.data.items() if k != "client"}
        try:
            dto = ContactPersonDTO.model_validate(data)
        except (PydanticValidationError, ValueError) as exc:
            return invalid_payload_response(exc)
        try:
            contact = self._service.update_contact_person(pk, dto)
        except ContactPersonNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(ContactPersonSerializer(contact).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_contact_person(pk)
        except ContactPersonNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)
