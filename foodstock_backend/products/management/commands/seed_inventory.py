# products/management/commands/seed_inventory.py

"""
Seed categories, food products and their initial batches.

Initial stock goes through the BatchLedger (never direct row inserts), so
current_stock and the audit trail stay consistent from the first row.
Idempotent: products that already have batches are skipped.
"""

from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.utils import timezone

from products.models import Category, Product
from products.services import get_recorder

CATEGORIES = [
    "Dairy",
    "Bakery",
    "Produce",
    "Dry Goods",
    "Beverages",
]

# sku, name, category, unit price, food?, shelf life days, min stock
PRODUCTS = [
    ("MILK-1L", "Whole Milk 1L", "Dairy", "1.20", True, 10, 20),
    ("BREAD-WW", "Wholewheat Bread", "Bakery", "2.50", True, 5, 15),
    ("APPLE-KG", "Apples 1kg", "Produce", "3.10", True, 21, 10),
    ("RICE-5KG", "Basmati Rice 5kg", "Dry Goods", "9.90", True, 365, 5),
    ("WATER-6PK", "Spring Water 6-pack", "Beverages", "4.00", False, None, 10),
]

# (batch number, quantity, days until expiry or None for the shelf-life default)
INITIAL_BATCHES = [
    ("INIT-001", 40, None),
    ("INIT-002", 25, 3),
]


class Command(BaseCommand):
    help = "Seed categories, products and initial inventory batches"

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products and stock..."))

        # -------------------------------
        # CATEGORIES
        # -------------------------------
        category_objs = {}
        for name in CATEGORIES:
            obj, _ = Category.objects.get_or_create(name=name)
            category_objs[name] = obj

        # -------------------------------
        # PRODUCTS
        # -------------------------------
        product_objs = []
        for sku, name, cat, price, is_food, shelf_life, min_stock in PRODUCTS:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "category": category_objs[cat],
                    "unit_price": Decimal(price),
                    "is_food_product": is_food,
                    "shelf_life_days": shelf_life,
                    "min_stock_level": min_stock,
                },
            )
            product_objs.append(product)

        # -------------------------------
        # INITIAL BATCHES (via ledger)
        # -------------------------------
        recorder = get_recorder()
        now = timezone.now()
        created = 0

        for product in product_objs:
            if product.batches.exists():
                continue

            for batch_number, qty, days in INITIAL_BATCHES:
                expiry = now + timedelta(days=days) if days is not None else None
                recorder.record_movement(
                    product_id=product.id,
                    direction="in",
                    quantity=qty,
                    reason="Initial stock",
                    batch_number=batch_number,
                    expiry_date=expiry,
                )
                created += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Products and stock seeded successfully ({created} batches created)."
            )
        )
