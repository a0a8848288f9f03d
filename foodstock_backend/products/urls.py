# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register product + inventory routes under /api/products/
- Includes viewset actions like:
    /products/products/alerts/low-stock/
    /products/stock-transactions/process/
    /products/inventory-batches/product/<product_id>/
    /products/inventory-batches/expiring/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.views import (
    CategoryViewSet,
    InventoryBatchViewSet,
    ProductViewSet,
    StockTransactionViewSet,
)

router = DefaultRouter()

router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"products", ProductViewSet, basename="products")
router.register(r"stock-transactions", StockTransactionViewSet, basename="stock-transactions")
router.register(r"inventory-batches", InventoryBatchViewSet, basename="inventory-batches")

urlpatterns = [
    path("", include(router.urls)),
]
