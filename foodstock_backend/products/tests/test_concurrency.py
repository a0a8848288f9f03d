# products/tests/test_concurrency.py

import threading
from datetime import datetime, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase

from products.repositories import InMemoryInventoryRepository
from products.services import TransactionRecorder
from products.services.exceptions import InsufficientStockError

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=dt_timezone.utc)


class ConcurrentStockOutTests(SimpleTestCase):
    """
    Concurrency tests.

    GUARANTEES:
    - Concurrent stock-outs never oversell
    - Stock ends up equal to the sum of batch remainders
    """

    WORKERS = 20

    def setUp(self):
        self.repo = InMemoryInventoryRepository()
        self.recorder = TransactionRecorder(self.repo, clock=lambda: NOW)
        self.product = self.repo.add_product(name="Basmati Rice 5kg", sku="RICE-5KG")
        for days, qty in ((3, 4), (7, 4), (None, 2)):
            self.recorder.record_movement(
                product_id=self.product.id,
                direction="in",
                quantity=qty,
                expiry_date=NOW + timedelta(days=days) if days else None,
            )

    def test_parallel_stock_outs_never_oversell(self):
        start = threading.Barrier(self.WORKERS)
        results = []
        results_guard = threading.Lock()

        def worker():
            start.wait()
            try:
                self.recorder.record_movement(
                    product_id=self.product.id, direction="out", quantity=1
                )
                outcome = "ok"
            except InsufficientStockError:
                outcome = "rejected"
            with results_guard:
                results.append(outcome)

        threads = [threading.Thread(target=worker) for _ in range(self.WORKERS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        self.assertEqual(results.count("ok"), 10)
        self.assertEqual(results.count("rejected"), self.WORKERS - 10)
        self.assertEqual(self.product.current_stock, 0)
        self.assertTrue(all(b.remaining_quantity == 0 for b in self.repo.batches.values()))
        self.assertEqual(self.repo.sum_remaining(self.product.id), 0)
