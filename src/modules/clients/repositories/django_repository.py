"""Django ORM implementations of the client repositories.

Look-ups return ``None`` instead of raising; archived rows are invisible.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.clients.models import Client, ContactPerson
from modules.clients.repositories.interfaces import (
    IClientRepository,
    IContactPersonRepository,
)

logger = structlog.get_logger(__name__)


class ClientDjangoRepository(IClientRepository):
    def get_by_id(self, id: str) -> Optional[Client]:
        try:
            return Client.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Client]:
        queryset = Client.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Client) -> Client:
        is_new = entity._state.adding
        entity.save()
        logger.info("client.saved", client_id=str(entity.id), is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        client = self.get_by_id(id)
        if not client:
            return False
        client.contact_persons.alive().delete()
        client.delete()
        logger.info("client.soft_deleted", client_id=str(id))
        return True


class ContactPersonDjangoRepository(IContactPersonRepository):
    def get_by_id(self, id: str) -> Optional[ContactPerson]:
        try:
            return ContactPerson.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_client(self, id: str, client_id: str) -> Optional[ContactPerson]:
        try:
            return (
                ContactPerson.objects.alive()
                .filter(id=id, client_id=client_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[ContactPerson]:
        queryset = ContactPerson.objects.alive().select_related("client")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def create_many(self, client: Client, rows: List[Dict[str, Any]]) -> List[ContactPerson]:
        created = [self.save(ContactPerson(client=client, **row)) for row in rows]
        logger.info("contact_person.bulk_created", client_id=str(client.id), count=len(created))
        return created

    @transaction.atomic
    def save(self, entity: ContactPerson) -> ContactPerson:
        entity.save()
        logger.info("contact_person.saved", contact_person_id=str(entity.id))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        contact = self.get_by_id(id)
        if not contact:
            return False
        contact.delete()
        logger.info("contact_person.soft_deleted", contact_person_id=str(id))
        return True
