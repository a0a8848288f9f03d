# products/services/aggregation.py

"""
READ-ONLY INVENTORY QUERIES

- expiring_batches: batches with stock left expiring within N days
- low_stock:        products at or below a stock threshold
- batches_for_product: a product's batches in FEFO order
- dashboard_stats:  the overview above plus catalog size and latest movements
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from products.repositories.base import InventoryRepository

from .batch_ledger import days_until, fefo_key, to_id
from .exceptions import ProductNotFoundError


@dataclass(frozen=True)
class ExpiringBatch:
    batch: object
    product_name: str
    days_until_expiry: int


def _non_negative(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer")
    return value


@dataclass(frozen=True)
class DashboardStats:
    total_products: int
    low_stock: list
    expiring: list
    recent_activity: list


class InventoryQueries:
    def __init__(self, repository: InventoryRepository, *, clock=timezone.now):
        self.repository = repository
        self.clock = clock

    def expiring_batches(self, days_ahead: int | None = None) -> list[ExpiringBatch]:
        if days_ahead is None:
            days_ahead = settings.INVENTORY_EXPIRY_WINDOW_DAYS
        days_ahead = _non_negative(days_ahead, "days_ahead")

        now = self.clock()
        batches = sorted(
            self.repository.expiring_batches(now + timedelta(days=days_ahead)),
            key=fefo_key,
        )
        names = self.repository.product_names(b.product_id for b in batches)
        return [
            ExpiringBatch(
                batch=b,
                product_name=names.get(b.product_id, ""),
                days_until_expiry=days_until(b.expiry_date, now),
            )
            for b in batches
        ]

    def low_stock(self, threshold: int | None = None) -> list:
        if threshold is None:
            threshold = settings.INVENTORY_LOW_STOCK_THRESHOLD
        threshold = _non_negative(threshold, "threshold")
        return self.repository.low_stock_products(threshold)

    def batches_for_product(self, product_id, *, include_exhausted: bool = True) -> list:
        pid = to_id(product_id, error=ProductNotFoundError)
        if self.repository.get_product(pid) is None:
            raise ProductNotFoundError(product_id)
        return sorted(
            self.repository.list_batches(pid, active_only=not include_exhausted),
            key=fefo_key,
        )

    def dashboard_stats(
        self,
        *,
        threshold: int | None = None,
        days_ahead: int | None = None,
        recent_limit: int = 5,
    ) -> DashboardStats:
        recent_limit = _non_negative(recent_limit, "recent_limit")
        return DashboardStats(
            total_products=self.repository.count_products(),
            low_stock=self.low_stock(threshold),
            expiring=self.expiring_batches(days_ahead),
            recent_activity=self.repository.recent_transactions(recent_limit),
        )
