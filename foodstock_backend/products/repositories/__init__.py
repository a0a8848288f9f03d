from .base import InventoryRepository
from .django_orm import DjangoInventoryRepository
from .memory import InMemoryInventoryRepository

__all__ = [
    "InventoryRepository",
    "DjangoInventoryRepository",
    "InMemoryInventoryRepository",
]
