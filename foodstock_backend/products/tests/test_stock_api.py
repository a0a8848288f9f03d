# products/tests/test_stock_api.py

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from products.models import InventoryBatch, Product, StockTransaction

User = get_user_model()

TXN_URL = "/api/products/stock-transactions/"
BATCH_URL = "/api/products/inventory-batches/"


class StockApiTestBase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="stock_admin", password="password123")
        self.client = APIClient()
        self.client.force_authenticate(self.user)

        self.product = Product.objects.create(
            name="Whole Milk 1L",
            sku="MILK-1L",
            unit_price=Decimal("1.20"),
            is_food_product=True,
            shelf_life_days=10,
            min_stock_level=20,
        )

    def stock_in(self, qty, **extra):
        payload = {"product_id": self.product.id, "type": "in", "quantity": qty, **extra}
        return self.client.post(TXN_URL, payload, format="json")


class StockTransactionApiTests(StockApiTestBase):
    """
    Stock transaction endpoint tests.

    GUARANTEES:
    - POST answers 201 with a list of rows
    - Domain errors map to 400 / 404 / 409 with a stable code
    - Pending rows can be processed or cancelled exactly once
    """

    def test_requires_authentication(self):
        anon = APIClient()
        self.assertEqual(anon.get(TXN_URL).status_code, status.HTTP_401_UNAUTHORIZED)

    def test_stock_in_returns_list_and_uses_shelf_life(self):
        res = self.stock_in(25, reason="Delivery")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(res.data), 1)
        self.assertEqual(res.data[0]["type"], "in")
        self.assertEqual(res.data[0]["user_id"], self.user.id)

        batch = InventoryBatch.objects.get(product=self.product)
        self.assertIsNotNone(batch.expiry_date)
        self.assertEqual(batch.created_by, self.user)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, 25)

    def test_camel_case_aliases_accepted(self):
        res = self.client.post(
            TXN_URL,
            {
                "productId": self.product.id,
                "type": "in",
                "quantity": 5,
                "batchNumber": "LOT-A",
                "expiryDate": "2030-01-15",
            },
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        batch = InventoryBatch.objects.get(batch_number="LOT-A")
        self.assertEqual(batch.expiry_date.date().isoformat(), "2030-01-15")

    def test_stock_out_spanning_batches(self):
        now = timezone.now()
        self.stock_in(5, expiry_date=(now + timedelta(days=2)).isoformat())
        self.stock_in(5, expiry_date=(now + timedelta(days=4)).isoformat())

        res = self.client.post(
            TXN_URL,
            {"product_id": self.product.id, "type": "out", "quantity": 7},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual([row["quantity"] for row in res.data], [5, 2])
        self.assertEqual(len({row["correlation_id"] for row in res.data}), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, 3)

    def test_insufficient_stock_is_409_and_writes_nothing(self):
        self.stock_in(4)

        res = self.client.post(
            TXN_URL,
            {"product_id": self.product.id, "type": "out", "quantity": 9},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["code"], "insufficient_stock")
        self.assertEqual(res.data["available"], 4)
        self.assertEqual(res.data["requested"], 9)
        self.assertEqual(StockTransaction.objects.filter(type="out").count(), 0)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, 4)

    def test_error_status_mapping(self):
        cases = [
            ({"product_id": 9999, "type": "in", "quantity": 1}, 404, "product_not_found"),
            ({"product_id": self.product.id, "type": "in", "quantity": 0}, 400, "invalid_quantity"),
            ({"product_id": self.product.id, "type": "in", "quantity": 2.5}, 400, "invalid_quantity"),
            ({"product_id": self.product.id, "type": "up", "quantity": 1}, 400, "invalid_direction"),
            (
                {"product_id": self.product.id, "type": "out", "quantity": 1, "batch_id": 9999},
                404,
                "batch_not_found",
            ),
        ]
        for payload, expected_status, code in cases:
            with self.subTest(code=code):
                res = self.client.post(TXN_URL, payload, format="json")
                self.assertEqual(res.status_code, expected_status)
                self.assertEqual(res.data["code"], code)

    def test_duplicate_batch_number_is_400(self):
        self.stock_in(1, batch_number="DUP")
        res = self.stock_in(1, batch_number="DUP")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["code"], "duplicate_batch_number")

    def test_pending_process_flow(self):
        res = self.stock_in(6, status="pending", batch_number="SUP-1")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        txn_id = res.data[0]["id"]
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, 0)

        listed = self.client.get(TXN_URL, {"status": "pending"})
        self.assertEqual([row["id"] for row in listed.data], [txn_id])

        res = self.client.post(f"{TXN_URL}process/", {"id": txn_id}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data[0]["status"], "completed")
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, 6)

        again = self.client.post(f"{TXN_URL}process/", {"id": txn_id}, format="json")
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.data["code"], "not_pending")

    def test_process_requires_id(self):
        res = self.client.post(f"{TXN_URL}process/", {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["detail"], "Transaction ID is required")

    def test_cancel_pending(self):
        txn_id = self.stock_in(3, status="pending").data[0]["id"]

        res = self.client.delete(f"{TXN_URL}{txn_id}/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["detail"], "Transaction cancelled successfully")
        self.assertFalse(StockTransaction.objects.filter(pk=txn_id).exists())

        missing = self.client.delete(f"{TXN_URL}{txn_id}/")
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

    def test_completed_transaction_cannot_be_cancelled(self):
        txn_id = self.stock_in(3).data[0]["id"]

        res = self.client.delete(f"{TXN_URL}{txn_id}/")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)


class InventoryQueryApiTests(StockApiTestBase):
    """
    Read endpoint tests.

    GUARANTEES:
    - Batches are listed in FEFO order
    - Expiring and low-stock views honour their query params
    """

    def test_batches_for_product_in_fefo_order(self):
        now = timezone.now()
        self.stock_in(1, batch_number="LATE", expiry_date=(now + timedelta(days=9)).isoformat())
        self.stock_in(1, batch_number="EARLY", expiry_date=(now + timedelta(days=1)).isoformat())

        res = self.client.get(f"{BATCH_URL}product/{self.product.id}/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([b["batch_number"] for b in res.data], ["EARLY", "LATE"])

        missing = self.client.get(f"{BATCH_URL}product/9999/")
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

    def test_expiring_batches(self):
        now = timezone.now()
        self.stock_in(2, batch_number="SOON", expiry_date=(now + timedelta(days=3)).isoformat())
        self.stock_in(2, batch_number="LATER", expiry_date=(now + timedelta(days=60)).isoformat())

        res = self.client.get(f"{BATCH_URL}expiring/", {"days": 7})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([row["batch_number"] for row in res.data], ["SOON"])
        self.assertEqual(res.data[0]["days_until_expiry"], 3)

        bad = self.client.get(f"{BATCH_URL}expiring/", {"days": -1})
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)

    def test_low_stock_alerts(self):
        self.stock_in(8)
        Product.objects.create(name="Sugar", sku="SUG-1", unit_price=Decimal("1.00"))

        res = self.client.get("/api/products/products/alerts/low-stock/", {"threshold": 5})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["threshold"], 5)
        self.assertEqual([p["sku"] for p in res.data["results"]], ["SUG-1"])

        res = self.client.get("/api/products/products/alerts/low-stock/")
        self.assertEqual(res.data["threshold"], 50)
        self.assertEqual(res.data["count"], 2)

    def test_product_with_history_cannot_be_deleted(self):
        self.stock_in(1)
        res = self.client.delete(f"/api/products/products/{self.product.id}/")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)


class StockInputLimitApiTests(StockApiTestBase):
    """
    GUARANTEES:
    - Values the columns cannot hold are rejected with 400, never a 500
    """

    def test_overlong_reason_is_400(self):
        res = self.stock_in(5, reason="x" * 300)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("reason", res.data)
        self.assertFalse(InventoryBatch.objects.exists())
        self.assertFalse(StockTransaction.objects.exists())

    def test_reason_at_column_limit_is_accepted(self):
        res = self.stock_in(5, reason="x" * 255)
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)

    def test_quantity_beyond_column_range_is_400(self):
        res = self.stock_in(2**31)

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["code"], "invalid_quantity")
        self.assertFalse(InventoryBatch.objects.exists())
