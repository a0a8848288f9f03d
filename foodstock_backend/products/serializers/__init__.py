# products/serializers/__init__.py

from .category import CategorySerializer
from .inventory_batch import ExpiringBatchSerializer, InventoryBatchSerializer
from .product import ProductSerializer
from .stock_transaction import (
    ProcessPendingSerializer,
    StockMovementRequestSerializer,
    StockTransactionSerializer,
)

__all__ = [
    "CategorySerializer",
    "ExpiringBatchSerializer",
    "InventoryBatchSerializer",
    "ProcessPendingSerializer",
    "ProductSerializer",
    "StockMovementRequestSerializer",
    "StockTransactionSerializer",
]
