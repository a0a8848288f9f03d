# products/views/__init__.py

"""
Products views package exports.

Purpose:
- Central export point for router imports.
"""

from .category import CategoryViewSet
from .dashboard import DashboardStatsView
from .inventory_batch import InventoryBatchViewSet
from .product import ProductViewSet
from .stock_transaction import StockTransactionViewSet

__all__ = [
    "CategoryViewSet",
    "DashboardStatsView",
    "InventoryBatchViewSet",
    "ProductViewSet",
    "StockTransactionViewSet",
]
