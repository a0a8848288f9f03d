# products/tests/test_batch_ledger.py

from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from products.models import InventoryBatch, Product
from products.repositories import DjangoInventoryRepository, InMemoryInventoryRepository
from products.services import BatchLedger
from products.services.batch_ledger import to_positive_quantity
from products.services.exceptions import (
    BatchNotFoundError,
    DuplicateBatchNumberError,
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=dt_timezone.utc)


class FixedClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class BatchLedgerTests(SimpleTestCase):
    """
    FEFO ledger tests (in-memory repository).

    GUARANTEES:
    - Earliest expiry is consumed first, undated batches last
    - A rejected stock-out leaves every batch untouched
    - current_stock always equals the sum of remaining quantities
    """

    def setUp(self):
        self.repo = InMemoryInventoryRepository()
        self.clock = FixedClock()
        self.ledger = BatchLedger(self.repo, clock=self.clock)
        self.milk = self.repo.add_product(
            name="Whole Milk 1L",
            sku="MILK-1L",
            is_food_product=True,
            shelf_life_days=10,
        )
        self.water = self.repo.add_product(name="Spring Water", sku="WATER-6PK")

    def _stock_in(self, qty, expiry=None, number=None, product=None):
        batch = self.ledger.create_batch(
            product_id=(product or self.water).id,
            quantity=qty,
            expiry_date=expiry,
            batch_number=number,
        )
        self.clock.advance(seconds=1)
        return batch

    # -------------------------------------------------
    # STOCK-IN
    # -------------------------------------------------

    def test_create_batch_sets_remaining_and_stock(self):
        batch = self._stock_in(30, number="LOT-1")

        self.assertEqual(batch.quantity, 30)
        self.assertEqual(batch.remaining_quantity, 30)
        self.assertEqual(batch.batch_number, "LOT-1")
        self.assertEqual(self.water.current_stock, 30)

    def test_food_product_gets_shelf_life_expiry(self):
        batch = self._stock_in(5, product=self.milk)
        self.assertEqual(batch.expiry_date, NOW + timedelta(days=10))

    def test_non_food_product_has_no_default_expiry(self):
        batch = self._stock_in(5)
        self.assertIsNone(batch.expiry_date)

    def test_explicit_expiry_overrides_shelf_life(self):
        expiry = NOW + timedelta(days=2)
        batch = self._stock_in(5, expiry=expiry, product=self.milk)
        self.assertEqual(batch.expiry_date, expiry)

    def test_past_expiry_is_accepted_with_warning(self):
        expiry = NOW - timedelta(days=1)
        with self.assertLogs("products.services.batch_ledger", level="WARNING"):
            batch = self._stock_in(5, expiry=expiry)
        self.assertEqual(batch.expiry_date, expiry)

    def test_plain_date_expiry_becomes_aware_datetime(self):
        batch = self._stock_in(5, expiry=date(2025, 7, 1))
        self.assertIsNotNone(batch.expiry_date.tzinfo)
        self.assertEqual(batch.expiry_date.date(), date(2025, 7, 1))

    def test_generated_batch_number_format(self):
        batch = self._stock_in(5)
        expected = f"B1-{int(NOW.timestamp() * 1000)}"
        self.assertEqual(batch.batch_number, expected)

    def test_duplicate_batch_number_rejected_per_product(self):
        self._stock_in(5, number="LOT-1")

        with self.assertRaises(DuplicateBatchNumberError):
            self._stock_in(5, number="LOT-1")

        # Same number on another product is fine.
        self._stock_in(5, number="LOT-1", product=self.milk)
        self.assertEqual(self.water.current_stock, 5)

    def test_unknown_product_rejected(self):
        with self.assertRaises(ProductNotFoundError):
            self.ledger.create_batch(product_id=999, quantity=1)

    def test_invalid_quantities_rejected(self):
        for bad in (0, -3, 1.5, "abc", True, None):
            with self.subTest(quantity=bad):
                with self.assertRaises(InvalidQuantityError):
                    self._stock_in(bad)
        self.assertEqual(self.water.current_stock, 0)
        self.assertEqual(self.repo.batches, {})

    def test_quantity_normalizer_accepts_integral_values(self):
        self.assertEqual(to_positive_quantity(4), 4)
        self.assertEqual(to_positive_quantity(4.0), 4)
        self.assertEqual(to_positive_quantity(" 7 "), 7)

    # -------------------------------------------------
    # STOCK-OUT
    # -------------------------------------------------

    def test_fefo_consumes_earliest_expiry_first(self):
        late = self._stock_in(10, expiry=NOW + timedelta(days=20))
        undated = self._stock_in(10)
        early = self._stock_in(10, expiry=NOW + timedelta(days=5))

        allocations = self.ledger.consume(product_id=self.water.id, quantity=15)

        self.assertEqual(
            [(a.batch.id, a.taken) for a in allocations],
            [(early.id, 10), (late.id, 5)],
        )
        self.assertEqual(early.remaining_quantity, 0)
        self.assertEqual(late.remaining_quantity, 5)
        self.assertEqual(undated.remaining_quantity, 10)
        self.assertEqual(self.water.current_stock, 15)

    def test_same_expiry_uses_oldest_batch_first(self):
        expiry = NOW + timedelta(days=5)
        first = self._stock_in(4, expiry=expiry)
        second = self._stock_in(4, expiry=expiry)

        allocations = self.ledger.consume(product_id=self.water.id, quantity=5)

        self.assertEqual([a.batch.id for a in allocations], [first.id, second.id])

    def test_undated_batches_are_consumed_last(self):
        undated = self._stock_in(10)
        dated = self._stock_in(10, expiry=NOW + timedelta(days=300))

        allocations = self.ledger.consume(product_id=self.water.id, quantity=12)

        self.assertEqual(
            [(a.batch.id, a.taken) for a in allocations],
            [(dated.id, 10), (undated.id, 2)],
        )

    def test_insufficient_stock_leaves_no_trace(self):
        a = self._stock_in(3, expiry=NOW + timedelta(days=1))
        b = self._stock_in(4)

        with self.assertRaises(InsufficientStockError) as ctx:
            self.ledger.consume(product_id=self.water.id, quantity=8)

        self.assertEqual(ctx.exception.extra(), {"available": 7, "requested": 8})
        self.assertIn("Spring Water", str(ctx.exception))
        self.assertEqual(a.remaining_quantity, 3)
        self.assertEqual(b.remaining_quantity, 4)
        self.assertEqual(self.water.current_stock, 7)

    def test_target_batch_consumption(self):
        early = self._stock_in(5, expiry=NOW + timedelta(days=1))
        late = self._stock_in(5, expiry=NOW + timedelta(days=9), number="LATE")

        allocations = self.ledger.consume(
            product_id=self.water.id, quantity=3, target_batch_id=late.id
        )

        self.assertEqual([(a.batch.id, a.taken) for a in allocations], [(late.id, 3)])
        self.assertEqual(early.remaining_quantity, 5)
        self.assertEqual(late.remaining_quantity, 2)

        with self.assertRaises(InsufficientStockError) as ctx:
            self.ledger.consume(
                product_id=self.water.id, quantity=3, target_batch_id=late.id
            )
        self.assertIn("batch LATE", str(ctx.exception))

    def test_target_batch_must_belong_to_product_and_have_stock(self):
        milk_batch = self._stock_in(5, product=self.milk)
        water_batch = self._stock_in(2)
        self.ledger.consume(product_id=self.water.id, quantity=2)

        for batch_id in (milk_batch.id, water_batch.id, 999):
            with self.subTest(batch_id=batch_id):
                with self.assertRaises(BatchNotFoundError):
                    self.ledger.consume(
                        product_id=self.water.id, quantity=1, target_batch_id=batch_id
                    )

    # -------------------------------------------------
    # AGGREGATE STOCK
    # -------------------------------------------------

    def test_recompute_stock_is_a_full_resum(self):
        self._stock_in(6)
        self._stock_in(4)
        self.water.current_stock = 999

        self.assertEqual(self.ledger.recompute_stock(self.water.id), 10)
        self.assertEqual(self.water.current_stock, 10)

    def test_find_stock_drift(self):
        self._stock_in(6)
        self.assertEqual(self.ledger.find_stock_drift(), [])

        self.water.current_stock = 1
        with self.assertLogs("products.services.batch_ledger", level="WARNING"):
            drift = self.ledger.find_stock_drift()

        self.assertEqual(drift, [(self.water, 1, 6)])


class DjangoBatchLedgerTests(TestCase):
    """
    FEFO ledger tests (ORM repository).

    GUARANTEES:
    - The same FEFO order holds against the database
    - A failed stock-out rolls back every batch it touched
    """

    def setUp(self):
        self.clock = FixedClock()
        self.ledger = BatchLedger(DjangoInventoryRepository(), clock=self.clock)
        self.product = Product.objects.create(
            name="Wholewheat Bread",
            sku="BREAD-WW",
            unit_price=Decimal("2.50"),
            is_food_product=True,
            shelf_life_days=5,
        )

    def _stock_in(self, qty, expiry=None, number=None):
        batch = self.ledger.create_batch(
            product_id=self.product.id,
            quantity=qty,
            expiry_date=expiry,
            batch_number=number,
        )
        self.clock.advance(seconds=1)
        return batch

    def test_fefo_against_database(self):
        late = self._stock_in(4, expiry=NOW + timedelta(days=9))
        default = self._stock_in(4)
        self.assertEqual(default.expiry_date, NOW + timedelta(days=5, seconds=1))

        allocations = self.ledger.consume(product_id=self.product.id, quantity=6)

        self.assertEqual(
            [(a.batch.id, a.taken) for a in allocations],
            [(default.id, 4), (late.id, 2)],
        )
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, 2)
        self.assertEqual(
            list(InventoryBatch.objects.order_by("id").values_list("remaining_quantity", flat=True)),
            [2, 0],
        )

    def test_failed_consume_rolls_back(self):
        self._stock_in(3)
        self._stock_in(3)

        with self.assertRaises(InsufficientStockError):
            self.ledger.consume(product_id=self.product.id, quantity=7)

        self.assertEqual(
            sorted(InventoryBatch.objects.values_list("remaining_quantity", flat=True)),
            [3, 3],
        )
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, 6)

    def test_duplicate_batch_number_against_database(self):
        self._stock_in(1, number="LOT-9")
        with self.assertRaises(DuplicateBatchNumberError):
            self._stock_in(1, number="LOT-9")
        self.assertEqual(InventoryBatch.objects.count(), 1)
