"""Counter repositories package."""

from modules.sequences.repositories.django_repository import CounterDjangoRepository
from modules.sequences.repositories.interfaces import ICounterRepository

__all__ = ["CounterDjangoRepository", "ICounterRepository"]
