"""Client and ContactPerson repository contracts."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.clients.models import Client, ContactPerson


class IClientRepository(IRepository["Client"]):
    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Client]:
        """Live (not archived) clients."""


class IContactPersonRepository(IRepository["ContactPerson"]):
    @abstractmethod
    def get_for_client(self, id: str, client_id: str) -> Optional[ContactPerson]:
        """Contact person *id* only if it belongs to *client_id*."""

    @abstractmethod
    def create_many(self, client: Client, rows: List[Dict[str, Any]]) -> List[ContactPerson]:
        """Insert several contacts for one client."""
