# products/models/stock_transaction.py

"""
STOCK TRANSACTION (AUDIT TRAIL)

One row per batch touched by a stock movement.

GUARANTEES:
- Completed rows are immutable and never deleted
- Pending rows may be completed ONCE, or deleted (cancelled)
- Rows produced by one logical request share a correlation_id
- batch_number / expiry_date are snapshots taken when the row was written
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .inventory_batch import InventoryBatch
from .product import Product


class StockTransaction(models.Model):
    class Type(models.TextChoices):
        IN = "in", "Stock In"
        OUT = "out", "Stock Out"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_transactions"
    )

    type = models.CharField(max_length=3, choices=Type.choices)
    quantity = models.PositiveIntegerField()
    reason = models.CharField(max_length=255, null=True, blank=True)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_transactions",
    )

    timestamp = models.DateTimeField()

    batch = models.ForeignKey(
        InventoryBatch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="transactions",
    )
    batch_number = models.CharField(max_length=128, null=True, blank=True)
    expiry_date = models.DateTimeField(null=True, blank=True)

    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.COMPLETED,
    )

    correlation_id = models.UUIDField(default=uuid.uuid4, db_index=True)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_transactions",
    )

    class Meta:
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["product", "timestamp"], name="stocktxn_product_ts_idx"),
            models.Index(fields=["status"], name="stocktxn_status_idx"),
            models.Index(fields=["type"], name="stocktxn_type_idx"),
        ]

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        if self.batch_id and self.product_id:
            batch_product_id = (
                InventoryBatch.objects.filter(id=self.batch_id)
                .values_list("product_id", flat=True)
                .first()
            )
            if batch_product_id is not None and batch_product_id != self.product_id:
                raise ValidationError("Batch does not belong to product")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            original_status = (
                StockTransaction.objects.filter(pk=self.pk)
                .values_list("status", flat=True)
                .first()
            )
            if original_status == self.Status.COMPLETED:
                raise ValidationError("Completed stock transactions are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.status != self.Status.PENDING:
            raise ValidationError(
                "Only pending stock transactions can be deleted (cancelled)"
            )
        return super().delete(*args, **kwargs)

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.type} | {self.quantity} | {self.status}"
