# products/repositories/base.py

"""
======================================================
PATH: products/repositories/base.py
======================================================
INVENTORY STORAGE INTERFACE

The batch ledger and transaction recorder talk to storage ONLY through this
interface, so the same FEFO/resum logic runs against:
- DjangoInventoryRepository   (ORM, production)
- InMemoryInventoryRepository (fast unit tests, scripting)

CONTRACT:
- Returned objects expose the model attribute names
  (product.current_stock, batch.remaining_quantity, txn.status, ...).
- Every mutation performed by a service happens inside lock_products(),
  which serializes work per product and (ORM) opens a DB transaction.
- Queries return plain lists; callers sort when order matters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Iterable


class InventoryRepository(ABC):
    # -------------------------------------------------
    # SERIALIZATION
    # -------------------------------------------------

    @abstractmethod
    def lock_products(self, product_ids: Iterable[int]) -> AbstractContextManager:
        """Hold the per-product locks (sorted order) for the duration of the block."""

    # -------------------------------------------------
    # PRODUCTS
    # -------------------------------------------------

    @abstractmethod
    def get_product(self, product_id: int):
        """Return the product or None."""

    @abstractmethod
    def list_products(self) -> list:
        ...

    @abstractmethod
    def count_products(self) -> int:
        ...

    @abstractmethod
    def low_stock_products(self, threshold: int) -> list:
        """Products with current_stock <= threshold, lowest stock first."""

    @abstractmethod
    def product_names(self, product_ids: Iterable[int]) -> dict:
        ...

    @abstractmethod
    def set_current_stock(self, product_id: int, value: int) -> None:
        ...

    # -------------------------------------------------
    # BATCHES
    # -------------------------------------------------

    @abstractmethod
    def next_batch_sequence(self) -> int:
        """Monotonically increasing number used in generated batch numbers."""

    @abstractmethod
    def batch_number_exists(self, product_id: int, batch_number: str) -> bool:
        ...

    @abstractmethod
    def add_batch(
        self,
        *,
        product_id: int,
        batch_number: str,
        quantity: int,
        expiry_date: datetime | None,
        created_at: datetime,
        created_by_id: int | None = None,
    ):
        """Insert a batch with remaining_quantity == quantity."""

    @abstractmethod
    def get_batch(self, batch_id: int):
        """Return the batch or None."""

    @abstractmethod
    def list_batches(self, product_id: int | None = None, *, active_only: bool = False) -> list:
        ...

    @abstractmethod
    def expiring_batches(self, cutoff: datetime) -> list:
        """Batches with stock left and a non-null expiry_date <= cutoff."""

    @abstractmethod
    def set_batch_remaining(self, batch, remaining: int) -> None:
        ...

    @abstractmethod
    def sum_remaining(self, product_id: int) -> int:
        ...

    # -------------------------------------------------
    # TRANSACTIONS
    # -------------------------------------------------

    @abstractmethod
    def add_transaction(self, **fields):
        """Insert a stock transaction row; fields use *_id names for relations."""

    @abstractmethod
    def get_transaction(self, transaction_id: int):
        """Return the transaction or None."""

    @abstractmethod
    def update_transaction(self, txn, **fields) -> None:
        ...

    @abstractmethod
    def delete_transaction(self, txn) -> None:
        ...

    @abstractmethod
    def list_transactions(
        self,
        *,
        product_id: int | None = None,
        status: str | None = None,
        order_id: int | None = None,
    ) -> list:
        """Newest first (timestamp, then id, descending)."""

    @abstractmethod
    def recent_transactions(self, limit: int) -> list:
        """The `limit` newest rows, newest first."""
