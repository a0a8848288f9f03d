"""
======================================================
PATH: products/migrations/0002_stocktransaction_order.py
======================================================
MIGRATION: LINK STOCK TRANSACTIONS TO ORDERS

Order-driven stock-outs carry the order they fulfil.
"""

from __future__ import annotations

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    dependencies = [
        ("products", "0001_initial"),
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="stocktransaction",
            name="order",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="stock_transactions",
                to="orders.order",
            ),
        ),
    ]
