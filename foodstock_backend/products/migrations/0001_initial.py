"""
======================================================
PATH: products/migrations/0001_initial.py
======================================================
MIGRATION: CATALOGUE + BATCH LEDGER TABLES

Creates Category, Product, InventoryBatch and StockTransaction.
StockTransaction.order is added in 0002 (after orders.0001 exists).
"""

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=128, unique=True)),
                ("description", models.TextField(blank=True, null=True)),
            ],
            options={
                "ordering": ["name"],
                "verbose_name_plural": "categories",
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("sku", models.CharField(db_index=True, max_length=128, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("description", models.TextField(blank=True, null=True)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "cost_price",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True
                    ),
                ),
                ("min_stock_level", models.PositiveIntegerField(default=10)),
                ("is_food_product", models.BooleanField(default=False)),
                (
                    "shelf_life_days",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Days from stock-in until a batch expires (food products only).",
                        null=True,
                    ),
                ),
                (
                    "current_stock",
                    models.PositiveIntegerField(default=0, editable=False),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="products",
                        to="products.category",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["name"], name="product_name_idx"),
                    models.Index(
                        fields=["current_stock"], name="product_current_stock_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("unit_price__gte", 0)),
                        name="chk_product_unit_price_gte_zero",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="InventoryBatch",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "batch_number",
                    models.CharField(
                        help_text="Supplier reference or generated B<seq>-<epoch ms>",
                        max_length=128,
                    ),
                ),
                (
                    "quantity",
                    models.PositiveIntegerField(
                        help_text="Quantity received (immutable)"
                    ),
                ),
                (
                    "remaining_quantity",
                    models.PositiveIntegerField(
                        help_text="Remaining quantity (ledger-managed only)"
                    ),
                ),
                ("expiry_date", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField()),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="inventory_batches",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="batches",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["expiry_date", "created_at", "id"],
                "verbose_name_plural": "inventory batches",
                "indexes": [
                    models.Index(
                        fields=["product", "expiry_date"],
                        name="batch_product_expiry_idx",
                    ),
                    models.Index(
                        fields=["product", "remaining_quantity"],
                        name="batch_product_remaining_idx",
                    ),
                    models.Index(
                        fields=["expiry_date"], name="batch_expiry_idx"
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("product", "batch_number"),
                        name="unique_batch_number_per_product",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="chk_batch_quantity_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("remaining_quantity__gte", 0)),
                        name="chk_batch_remaining_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("remaining_quantity__lte", models.F("quantity"))
                        ),
                        name="chk_batch_remaining_lte_quantity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockTransaction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[("in", "Stock In"), ("out", "Stock Out")],
                        max_length=3,
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                ("reason", models.CharField(blank=True, max_length=255, null=True)),
                ("timestamp", models.DateTimeField()),
                (
                    "batch_number",
                    models.CharField(blank=True, max_length=128, null=True),
                ),
                ("expiry_date", models.DateTimeField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed")],
                        default="completed",
                        max_length=16,
                    ),
                ),
                (
                    "correlation_id",
                    models.UUIDField(db_index=True, default=uuid.uuid4),
                ),
                (
                    "batch",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="products.inventorybatch",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_transactions",
                        to="products.product",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
                "indexes": [
                    models.Index(
                        fields=["product", "timestamp"],
                        name="stocktxn_product_ts_idx",
                    ),
                    models.Index(fields=["status"], name="stocktxn_status_idx"),
                    models.Index(fields=["type"], name="stocktxn_type_idx"),
                ],
            },
        ),
    ]
