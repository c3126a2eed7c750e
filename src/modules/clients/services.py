"""Client service layer.

Thin use-cases over the client repositories. The order lifecycle uses
``resolve_order_parties`` to validate the client / contact pair an order
refers to.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

import structlog
from django.db import transaction

from modules.clients.exceptions import ClientNotFound, ContactPersonNotFound, InactiveClient
from modules.clients.models import Client, ContactPerson

if TYPE_CHECKING:
    from modules.clients.dtos import ContactPersonDTO, CreateClientDTO, UpdateClientDTO
    from modules.clients.repositories.interfaces import (
        IClientRepository,
        IContactPersonRepository,
    )

logger = structlog.get_logger(__name__)


class ClientService:
    """Receives both repositories via constructor injection."""

    def __init__(
        self,
        client_repository: IClientRepository,
        contact_repository: IContactPersonRepository,
    ) -> None:
        self._client_repo = client_repository
        self._contact_repo = contact_repository

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_client(self, dto: CreateClientDTO) -> Client:
        client = self._client_repo.save(
            Client(name=dto.name, city=dto.city, state=dto.state, pincode=dto.pincode)
        )
        if dto.contact_persons:
            self._contact_repo.create_many(
                client, [c.model_dump(exclude_none=True) for c in dto.contact_persons]
            )
        logger.info(
            "client.created",
            client_id=str(client.id),
            contact_count=len(dto.contact_persons),
        )
        return client

    @transaction.atomic
    def update_client(self, id: str, dto: UpdateClientDTO) -> Client:
        client = self.get_client(id)
        for field, value in dto.model_dump(exclude_none=True).items():
            setattr(client, field, value)
        client = self._client_repo.save(client)
        logger.info("client.updated", client_id=str(id))
        return client

    def get_client(self, id: str) -> Client:
        client = self._client_repo.get_by_id(id)
        if not client:
            raise ClientNotFound(f"Client {id} not found.", {"client_id": str(id)})
        return client

    def list_clients(self, filters: Optional[Dict[str, Any]] = None) -> List[Client]:
        return self._client_repo.list(filters)

    @transaction.atomic
    def delete_client(self, id: str) -> None:
        """Archive a client together with its contact persons."""
        if not self._client_repo.delete(id):
            raise ClientNotFound(f"Client {id} not found.", {"client_id": str(id)})

    # ------------------------------------------------------------------
    # Contact persons
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_contact_person(self, client_id: str, dto: ContactPersonDTO) -> ContactPerson:
        client = self.get_client(client_id)
        contact = self._contact_repo.save(
            ContactPerson(client=client, **dto.model_dump(exclude_none=True))
        )
        logger.info(
            "contact_person.created",
            client_id=str(client.id),
            contact_person_id=str(contact.id),
        )
        return contact

    @transaction.atomic
    def update_contact_person(self, id: str, dto: ContactPersonDTO) -> ContactPerson:
        contact = self.get_contact_person(id)
        for field, value in dto.model_dump(exclude_none=True).items():
            setattr(contact, field, value)
        return self._contact_repo.save(contact)

    def get_contact_person(self, id: str) -> ContactPerson:
        contact = self._contact_repo.get_by_id(id)
        if not contact:
            raise ContactPersonNotFound(
                f"Contact person {id} not found.", {"contact_person_id": str(id)}
            )
        return contact

    def list_contact_persons(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> List[ContactPerson]:
        return self._contact_repo.list(filters)

    @transaction.atomic
    def delete_contact_person(self, id: str) -> None:
        if not self._contact_repo.delete(id):
            raise ContactPersonNotFound(
                f"Contact person {id} not found.", {"contact_person_id": str(id)}
            )

    # ------------------------------------------------------------------
    # Order support
    # ------------------------------------------------------------------

    def resolve_order_parties(
        self, client_id: str, contact_person_id: str
    ) -> Tuple[Client, ContactPerson]:
        """Return the client and its contact person for a new order.

        Raises:
            ClientNotFound: unknown or archived client.
            InactiveClient: client is flagged inactive.
            ContactPersonNotFound: unknown contact or one of another client.
        """
        client = self.get_client(client_id)
        if not client.is_active:
            raise InactiveClient(
                f"Client {client_id} is inactive.", {"client_id": str(client_id)}
            )
        contact = self._contact_repo.get_for_client(contact_person_id, str(client.id))
        if not contact:
            raise ContactPersonNotFound(
                f"Contact person {contact_person_id} not found for client {client_id}.",
                {"contact_person_id": str(contact_person_id)},
            )
        return client, contact
