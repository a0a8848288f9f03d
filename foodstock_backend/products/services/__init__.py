"""
PATH: products/services/__init__.py

Service entry points wired to the ORM repository.
"""

from .aggregation import DashboardStats, ExpiringBatch, InventoryQueries
from .batch_ledger import Allocation, BatchLedger
from .transaction_recorder import TransactionRecorder


def get_repository():
    from products.repositories import DjangoInventoryRepository

    return DjangoInventoryRepository()


def get_ledger() -> BatchLedger:
    return BatchLedger(get_repository())


def get_recorder() -> TransactionRecorder:
    return TransactionRecorder(get_repository())


def get_queries() -> InventoryQueries:
    return InventoryQueries(get_repository())


__all__ = [
    "Allocation",
    "BatchLedger",
    "DashboardStats",
    "ExpiringBatch",
    "InventoryQueries",
    "TransactionRecorder",
    "get_ledger",
    "get_queries",
    "get_recorder",
    "get_repository",
]
