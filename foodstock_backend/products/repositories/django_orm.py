# products/repositories/django_orm.py

"""
ORM-BACKED INVENTORY REPOSITORY

Serialization:
- process-local per-product RLocks (products.services.locking)
- transaction.atomic() + SELECT ... FOR UPDATE on the product rows

Any exception raised inside lock_products() rolls the whole block back, so a
failed multi-batch stock-out or a failed pending-processing leaves no trace.
"""

from __future__ import annotations

from contextlib import contextmanager

from django.db import transaction
from django.db.models import Max, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from products.models import InventoryBatch, Product, StockTransaction
from products.services.locking import ProductLockRegistry, product_locks

from .base import InventoryRepository


class DjangoInventoryRepository(InventoryRepository):
    def __init__(self, locks: ProductLockRegistry | None = None):
        self.locks = locks or product_locks

    @contextmanager
    def lock_products(self, product_ids):
        with self.locks.acquire(product_ids) as ordered:
            with transaction.atomic():
                if ordered:
                    # Row locks in id order; ignored by SQLite, honoured by Postgres.
                    list(
                        Product.objects.select_for_update()
                        .filter(pk__in=ordered)
                        .order_by("pk")
                        .values_list("pk", flat=True)
                    )
                yield ordered

    # -------------------------------------------------
    # PRODUCTS
    # -------------------------------------------------

    def get_product(self, product_id):
        return Product.objects.filter(pk=product_id).first()

    def list_products(self):
        return list(Product.objects.order_by("id"))

    def count_products(self):
        return Product.objects.count()

    def low_stock_products(self, threshold):
        return list(
            Product.objects.select_related("category")
            .filter(current_stock__lte=threshold)
            .order_by("current_stock", "name", "id")
        )

    def product_names(self, product_ids):
        return dict(
            Product.objects.filter(pk__in=set(product_ids)).values_list("id", "name")
        )

    def set_current_stock(self, product_id, value):
        Product.objects.filter(pk=product_id).update(
            current_stock=int(value),
            updated_at=timezone.now(),
        )

    # -------------------------------------------------
    # BATCHES
    # -------------------------------------------------

    def next_batch_sequence(self):
        current = InventoryBatch.objects.aggregate(m=Max("id"))["m"] or 0
        return int(current) + 1

    def batch_number_exists(self, product_id, batch_number):
        return InventoryBatch.objects.filter(
            product_id=product_id,
            batch_number=batch_number,
        ).exists()

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
        batch = InventoryBatch(
            product_id=product_id,
            batch_number=batch_number,
            quantity=int(quantity),
            remaining_quantity=int(quantity),
            expiry_date=expiry_date,
            created_at=created_at,
            created_by_id=created_by_id,
        )
        batch.save()
        return batch

    def get_batch(self, batch_id):
        return InventoryBatch.objects.filter(pk=batch_id).first()

    def list_batches(self, product_id=None, *, active_only=False):
        qs = InventoryBatch.objects.select_related("product")
        if product_id is not None:
            qs = qs.filter(product_id=product_id)
        if active_only:
            qs = qs.filter(remaining_quantity__gt=0)
        return list(qs)

    def expiring_batches(self, cutoff):
        return list(
            InventoryBatch.objects.select_related("product").filter(
                remaining_quantity__gt=0,
                expiry_date__isnull=False,
                expiry_date__lte=cutoff,
            )
        )

    def set_batch_remaining(self, batch, remaining):
        batch.remaining_quantity = int(remaining)
        batch.save(update_fields=["remaining_quantity"])

    def sum_remaining(self, product_id):
        total = InventoryBatch.objects.filter(product_id=product_id).aggregate(
            total=Coalesce(Sum("remaining_quantity"), 0)
        )["total"]
        return int(total or 0)

    # -------------------------------------------------
    # TRANSACTIONS
    # -------------------------------------------------

    def add_transaction(self, **fields):
        txn = StockTransaction(**fields)
        txn.save()
        return txn

    def get_transaction(self, transaction_id):
        return StockTransaction.objects.filter(pk=transaction_id).first()

    def update_transaction(self, txn, **fields):
        for name, value in fields.items():
            setattr(txn, name, value)
        txn.save(update_fields=list(fields))

    def delete_transaction(self, txn):
        txn.delete()

    def list_transactions(self, *, product_id=None, status=None, order_id=None):
        qs = StockTransaction.objects.select_related("product", "batch")
        if product_id is not None:
            qs = qs.filter(product_id=product_id)
        if status is not None:
            qs = qs.filter(status=status)
        if order_id is not None:
            qs = qs.filter(order_id=order_id)
        return list(qs.order_by("-timestamp", "-id"))

    def recent_transactions(self, limit):
        qs = StockTransaction.objects.select_related("product", "batch")
        return list(qs.order_by("-timestamp", "-id")[:limit])
