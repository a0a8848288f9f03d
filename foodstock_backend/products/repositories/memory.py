# products/repositories/memory.py

"""
IN-MEMORY INVENTORY REPOSITORY

Dict-backed storage with the same attribute names as the ORM models.
Used by the ledger unit tests and the thread-safety tests.

No rollback exists here: the services validate fully before mutating, so a
rejected movement never needs undoing.
"""

from __future__ import annotations

import itertools
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from products.services.locking import ProductLockRegistry

from .base import InventoryRepository


@dataclass
class ProductRecord:
    id: int
    name: str
    sku: str
    unit_price: Decimal = Decimal("0.00")
    min_stock_level: int = 10
    is_food_product: bool = False
    shelf_life_days: int | None = None
    current_stock: int = 0
    is_active: bool = True

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock_level


@dataclass
class BatchRecord:
    id: int
    product_id: int
    batch_number: str
    quantity: int
    remaining_quantity: int
    expiry_date: datetime | None
    created_at: datetime
    created_by_id: int | None = None

    @property
    def is_exhausted(self) -> bool:
        return self.remaining_quantity == 0


@dataclass
class TransactionRecord:
    id: int
    product_id: int
    type: str
    quantity: int
    timestamp: datetime
    status: str
    reason: str | None = None
    user_id: int | None = None
    batch_id: int | None = None
    batch_number: str | None = None
    expiry_date: datetime | None = None
    correlation_id: uuid.UUID = field(default_factory=uuid.uuid4)
    order_id: int | None = None


class InMemoryInventoryRepository(InventoryRepository):
    def __init__(self, locks: ProductLockRegistry | None = None):
        self.locks = locks or ProductLockRegistry()
        self.products: dict[int, ProductRecord] = {}
        self.batches: dict[int, BatchRecord] = {}
        self.transactions: dict[int, TransactionRecord] = {}
        self._product_ids = itertools.count(1)
        self._batch_ids = itertools.count(1)
        self._transaction_ids = itertools.count(1)

    @contextmanager
    def lock_products(self, product_ids):
        with self.locks.acquire(product_ids) as ordered:
            yield ordered

    # -------------------------------------------------
    # PRODUCTS
    # -------------------------------------------------

    def add_product(self, *, name, sku, **fields) -> ProductRecord:
        product = ProductRecord(id=next(self._product_ids), name=name, sku=sku, **fields)
        self.products[product.id] = product
        return product

    def get_product(self, product_id):
        return self.products.get(product_id)

    def list_products(self):
        return sorted(self.products.values(), key=lambda p: p.id)

    def count_products(self):
        return len(self.products)

    def low_stock_products(self, threshold):
        rows = [p for p in self.products.values() if p.current_stock <= threshold]
        return sorted(rows, key=lambda p: (p.current_stock, p.name, p.id))

    def product_names(self, product_ids):
        return {
            pid: self.products[pid].name for pid in set(product_ids) if pid in self.products
        }

    def set_current_stock(self, product_id, value):
        self.products[product_id].current_stock = int(value)

    # -------------------------------------------------
    # BATCHES
    # -------------------------------------------------

    def next_batch_sequence(self):
        return max(self.batches, default=0) + 1

    def batch_number_exists(self, product_id, batch_number):
        return any(
            b.product_id == product_id and b.batch_number == batch_number
            for b in self.batches.values()
        )

    def add_batch(
        self,
        *,
        product_id,
        batch_number,
        quantity,
        expiry_date,
        created_at,
        created_by_id=None,
    ):
        batch = BatchRecord(
            id=next(self._batch_ids),
            product_id=product_id,
            batch_number=batch_number,
            quantity=int(quantity),
            remaining_quantity=int(quantity),
            expiry_date=expiry_date,
            created_at=created_at,
            created_by_id=created_by_id,
        )
        self.batches[batch.id] = batch
        return batch

    def get_batch(self, batch_id):
        return self.batches.get(batch_id)

    def list_batches(self, product_id=None, *, active_only=False):
        rows = list(self.batches.values())
        if product_id is not None:
            rows = [b for b in rows if b.product_id == product_id]
        if active_only:
            rows = [b for b in rows if b.remaining_quantity > 0]
        return rows

    def expiring_batches(self, cutoff):
        return [
            b
            for b in self.batches.values()
            if b.remaining_quantity > 0
            and b.expiry_date is not None
            and b.expiry_date <= cutoff
        ]

    def set_batch_remaining(self, batch, remaining):
        remaining = int(remaining)
        if remaining < 0 or remaining > batch.quantity:
            raise ValueError("remaining_quantity must stay within 0..quantity")
        batch.remaining_quantity = remaining

    def sum_remaining(self, product_id):
        return sum(
            b.remaining_quantity for b in self.batches.values() if b.product_id == product_id
        )

    # -------------------------------------------------
    # TRANSACTIONS
    # -------------------------------------------------

    def add_transaction(self, **fields):
        txn = TransactionRecord(id=next(self._transaction_ids), **fields)
        self.transactions[txn.id] = txn
        return txn

    def get_transaction(self, transaction_id):
        return self.transactions.get(transaction_id)

    def update_transaction(self, txn, **fields):
        for name, value in fields.items():
            setattr(txn, name, value)

    def delete_transaction(self, txn):
        self.transactions.pop(txn.id, None)

    def list_transactions(self, *, product_id=None, status=None, order_id=None):
        rows = list(self.transactions.values())
        if product_id is not None:
            rows = [t for t in rows if t.product_id == product_id]
        if status is not None:
            rows = [t for t in rows if t.status == status]
        if order_id is not None:
            rows = [t for t in rows if t.order_id == order_id]
        return sorted(rows, key=lambda t: (t.timestamp, t.id), reverse=True)

    def recent_transactions(self, limit):
        return self.list_transactions()[:limit]
