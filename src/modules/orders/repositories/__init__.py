"""Order repositories package."""

from modules.orders.repositories.django_repository import (
    OrderDjangoRepository,
    UserDjangoRepository,
)
from modules.orders.repositories.interfaces import IOrderRepository, IUserRepository

__all__ = [
    "IOrderRepository",
    "IUserRepository",
    "OrderDjangoRepository",
    "UserDjangoRepository",
]
