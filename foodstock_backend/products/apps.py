# products/apps.py

"""
PRODUCTS APP CONFIG

Catalogue + batch-based stock accounting:
- Categories and products
- Inventory batches (one per stock-in)
- Stock transactions (audit trail of every movement)
"""

from django.apps import AppConfig


class ProductsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "products"
    verbose_name = "Products & Inventory"
