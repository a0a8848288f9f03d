"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .category import Category
from .product import Product
from .inventory_batch import InventoryBatch
from .stock_transaction import StockTransaction

__all__ = [
    "Category",
    "Product",
    "InventoryBatch",
    "StockTransaction",
]
