# products/tests/test_transaction_recorder.py

from datetime import datetime, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase

from products.repositories import InMemoryInventoryRepository
from products.services import TransactionRecorder
from products.services.exceptions import (
    BatchNotFoundError,
    DuplicateBatchNumberError,
    InsufficientStockError,
    InvalidDirectionError,
    InvalidExpiryError,
    InvalidFieldLengthError,
    InvalidQuantityError,
    InvalidStatusError,
    NotPendingError,
    ProductNotFoundError,
    TransactionNotFoundError,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=dt_timezone.utc)


class TransactionRecorderTests(SimpleTestCase):
    """
    Audit trail tests.

    GUARANTEES:
    - One row per batch touched, all sharing one correlation_id
    - Pending rows never move stock until processed
    - Completed rows cannot be processed or cancelled again
    """

    def setUp(self):
        self.repo = InMemoryInventoryRepository()
        self.recorder = TransactionRecorder(self.repo, clock=lambda: NOW)
        self.product = self.repo.add_product(name="Apples 1kg", sku="APPLE-KG")

    def _stock_in(self, qty, days=None, number=None):
        expiry = NOW + timedelta(days=days) if days is not None else None
        return self.recorder.record_movement(
            product_id=self.product.id,
            direction="in",
            quantity=qty,
            expiry_date=expiry,
            batch_number=number,
        )

    def test_stock_in_writes_one_completed_row(self):
        rows = self._stock_in(12, days=5, number="A-1")

        self.assertEqual(len(rows), 1)
        row = rows[0]
        self.assertEqual(row.type, "in")
        self.assertEqual(row.status, "completed")
        self.assertEqual(row.quantity, 12)
        self.assertEqual(row.batch_number, "A-1")
        self.assertEqual(row.expiry_date, NOW + timedelta(days=5))
        self.assertEqual(self.product.current_stock, 12)

    def test_multi_batch_stock_out_splits_rows(self):
        first = self._stock_in(5, days=1)[0]
        second = self._stock_in(5, days=2)[0]

        rows = self.recorder.record_movement(
            product_id=self.product.id, direction="OUT", quantity=7, reason="Sold"
        )

        self.assertEqual(
            [(r.batch_id, r.quantity) for r in rows],
            [(first.batch_id, 5), (second.batch_id, 2)],
        )
        self.assertEqual(len({r.correlation_id for r in rows}), 1)
        self.assertTrue(all(r.reason == "Sold" for r in rows))
        self.assertEqual(self.product.current_stock, 3)

    def test_rejected_movements_write_nothing(self):
        self._stock_in(2)
        before = dict(self.repo.transactions)

        cases = [
            ({"direction": "sideways", "quantity": 1}, InvalidDirectionError),
            ({"direction": "out", "quantity": 1, "status": "done"}, InvalidStatusError),
            ({"direction": "out", "quantity": 3}, InsufficientStockError),
            ({"direction": "out", "quantity": 1, "target_batch_id": 99}, BatchNotFoundError),
        ]
        for kwargs, error in cases:
            with self.subTest(error=error.__name__):
                with self.assertRaises(error):
                    self.recorder.record_movement(product_id=self.product.id, **kwargs)

        with self.assertRaises(ProductNotFoundError):
            self.recorder.record_movement(product_id=404, direction="in", quantity=1)

        self.assertEqual(self.repo.transactions, before)
        self.assertEqual(self.product.current_stock, 2)

    def test_pending_stock_in_lifecycle(self):
        rows = self.recorder.record_movement(
            product_id=self.product.id,
            direction="in",
            quantity=8,
            batch_number="SUP-9",
            status="pending",
        )
        pending = rows[0]
        self.assertEqual(pending.status, "pending")
        self.assertIsNone(pending.batch_id)
        self.assertEqual(self.product.current_stock, 0)
        self.assertEqual(self.repo.batches, {})

        processed = self.recorder.process_pending(pending.id, user_id=3)

        self.assertEqual(processed, [pending])
        self.assertEqual(pending.status, "completed")
        self.assertEqual(pending.user_id, 3)
        self.assertIsNotNone(pending.batch_id)
        self.assertEqual(self.repo.get_batch(pending.batch_id).batch_number, "SUP-9")
        self.assertEqual(self.product.current_stock, 8)

        with self.assertRaises(NotPendingError):
            self.recorder.process_pending(pending.id)
        with self.assertRaises(NotPendingError):
            self.recorder.cancel_pending(pending.id)

    def test_pending_stock_out_splits_on_processing(self):
        self._stock_in(3, days=1)
        self._stock_in(3, days=2)
        pending = self.recorder.record_movement(
            product_id=self.product.id, direction="out", quantity=5, status="pending"
        )[0]
        self.assertEqual(self.product.current_stock, 6)

        rows = self.recorder.process_pending(pending.id)

        self.assertEqual(rows[0].id, pending.id)
        self.assertEqual([r.quantity for r in rows], [3, 2])
        self.assertEqual({r.correlation_id for r in rows}, {pending.correlation_id})
        self.assertEqual(self.product.current_stock, 1)

    def test_failed_processing_keeps_row_pending(self):
        pending = self.recorder.record_movement(
            product_id=self.product.id, direction="out", quantity=5, status="pending"
        )[0]

        with self.assertRaises(InsufficientStockError):
            self.recorder.process_pending(pending.id)

        self.assertEqual(pending.status, "pending")
        self.assertEqual(pending.quantity, 5)

    def test_processing_duplicate_batch_number_fails(self):
        self._stock_in(1, number="DUP")
        pending = self.recorder.record_movement(
            product_id=self.product.id,
            direction="in",
            quantity=1,
            batch_number="DUP",
            status="pending",
        )[0]

        with self.assertRaises(DuplicateBatchNumberError):
            self.recorder.process_pending(pending.id)
        self.assertEqual(pending.status, "pending")

    def test_cancel_pending_removes_row(self):
        pending = self.recorder.record_movement(
            product_id=self.product.id, direction="in", quantity=4, status="pending"
        )[0]

        self.recorder.cancel_pending(pending.id)

        self.assertIsNone(self.repo.get_transaction(pending.id))
        with self.assertRaises(TransactionNotFoundError):
            self.recorder.cancel_pending(pending.id)
        with self.assertRaises(TransactionNotFoundError):
            self.recorder.process_pending("abc")

    def test_list_movements_filters(self):
        self._stock_in(4)
        self.recorder.record_movement(
            product_id=self.product.id, direction="in", quantity=1, status="pending"
        )

        self.assertEqual(len(self.recorder.list_movements()), 2)
        self.assertEqual(len(self.recorder.list_movements(status="pending")), 1)
        self.assertEqual(len(self.recorder.list_movements(product_id=999)), 0)
        with self.assertRaises(InvalidStatusError):
            self.recorder.list_movements(status="archived")


class MovementInputLimitTests(SimpleTestCase):
    """
    GUARANTEES:
    - Over-long text, oversized quantities and non-date expiries raise
      typed ledger errors before anything is written
    """

    def setUp(self):
        self.repo = InMemoryInventoryRepository()
        self.recorder = TransactionRecorder(self.repo, clock=lambda: NOW)
        self.product = self.repo.add_product(name="Oat Milk", sku="OAT-1L")

    def _record(self, **kwargs):
        params = {"product_id": self.product.id, "direction": "in", "quantity": 1}
        params.update(kwargs)
        return self.recorder.record_movement(**params)

    def test_overlong_reason_rejected(self):
        with self.assertRaises(InvalidFieldLengthError) as ctx:
            self._record(reason="x" * 256)

        self.assertEqual(ctx.exception.http_status, 400)
        self.assertEqual(ctx.exception.extra(), {"field": "reason", "max_length": 255})
        self.assertEqual(self.repo.transactions, {})
        self.assertEqual(self.repo.batches, {})

    def test_overlong_batch_number_rejected(self):
        with self.assertRaises(InvalidFieldLengthError):
            self._record(batch_number="B" * 129)
        self.assertEqual(self.repo.batches, {})

    def test_reason_is_stripped(self):
        row = self._record(reason="  Delivery  ")[0]
        self.assertEqual(row.reason, "Delivery")

    def test_quantity_above_column_range_rejected(self):
        with self.assertRaises(InvalidQuantityError):
            self._record(quantity=2**31)
        self.assertEqual(self.product.current_stock, 0)

    def test_non_date_expiry_rejected(self):
        with self.assertRaises(InvalidExpiryError) as ctx:
            self._record(expiry_date="next tuesday")

        self.assertEqual(ctx.exception.code, "invalid_expiry")
        self.assertEqual(ctx.exception.http_status, 400)
        self.assertEqual(self.repo.batches, {})
