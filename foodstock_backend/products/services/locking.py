# products/services/locking.py

"""
PER-PRODUCT SERIALIZATION

Every ledger mutation for a product (stock-in, stock-out, resum) runs while
holding that product's lock. Locks are:
- process-local re-entrant locks (a recorder holding the lock may call the
  ledger which takes it again)
- acquired in sorted id order, so multi-product orders cannot deadlock

The ORM repository layers `transaction.atomic()` + `select_for_update()` on
top of this for cross-process safety.
"""

from __future__ import annotations

import threading
from contextlib import ExitStack, contextmanager
from typing import Iterable, Iterator


class ProductLockRegistry:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict = {}

    def _lock_for(self, product_id) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(product_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[product_id] = lock
            return lock

    @contextmanager
    def acquire(self, product_ids: Iterable) -> Iterator[list]:
        ordered = sorted({pid for pid in product_ids if pid is not None})
        with ExitStack() as stack:
            for pid in ordered:
                stack.enter_context(self._lock_for(pid))
            yield ordered


product_locks = ProductLockRegistry()
