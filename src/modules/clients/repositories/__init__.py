"""Client repositories package."""

from modules.clients.repositories.django_repository import (
    ClientDjangoRepository,
    ContactPersonDjangoRepository,
)
from modules.clients.repositories.interfaces import (
    IClientRepository,
    IContactPersonRepository,
)

__all__ = [
    "ClientDjangoRepository",
    "ContactPersonDjangoRepository",
    "IClientRepository",
    "IContactPersonRepository",
]
