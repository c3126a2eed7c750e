"""Counter administration API.

Counters are normally advanced only by order creation; these endpoints
exist so an administrator can seed or correct a sequence.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.responses import error_response, invalid_payload_response
from modules.sequences.dtos import CounterDTO, UpdateCounterDTO
from modules.sequences.exceptions import CounterNotFound, DuplicateCounterPrefix
from modules.sequences.models import Counter
from modules.sequences.repositories import CounterDjangoRepository
from modules.sequences.serializers import CounterSerializer
from modules.sequences.services import CounterService


class CounterViewSet(ListModelMixin, GenericViewSet):
    permission_classes = [IsAdminUser]
    queryset = Counter.objects.all()
    serializer_class = CounterSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CounterService(counter_repository=CounterDjangoRepository())

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/counters/{pk}/"""
        try:
            counter = self._service.get_counter(pk)
        except CounterNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(CounterSerializer(counter).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/counters/"""
        try:
            dto = CounterDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return invalid_payload_response(exc)
        try:
            counter = self._service.create_counter(dto)
        except DuplicateCounterPrefix as exc:
            return error_response(exc, status.HTTP_409_CONFLICT)
        return Response(CounterSerializer(counter).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/counters/{pk}/"""
        try:
            dto = UpdateCounterDTO.model_validate(request.data)
        except (PydanticValidationError, ValueError) as exc:
            return invalid_payload_response(exc)
        try:
            counter = self._service.update_counter(pk, dto)
        except CounterNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        except DuplicateCounterPrefix as exc:
            return error_response(exc, status.HTTP_409_CONFLICT)
        return Response(CounterSerializer(counter).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/counters/{pk}/"""
        try:
            self._service.delete_counter(pk)
        except CounterNotFound as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)
