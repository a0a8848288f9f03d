# products/models/product.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .category import Category


class Product(models.Model):
    """
    Represents a stocked product.

    STOCK MODEL (IMPORTANT):
    - Stock lives in InventoryBatch rows
    - current_stock is a CACHE of sum(batch.remaining_quantity)
    - current_stock is written ONLY by the batch ledger (full resum),
      never by API clients

    FOOD PRODUCTS:
    - is_food_product + shelf_life_days drive the default batch expiry
      (created_at + shelf_life_days) when stock-in gives no explicit date.
    """

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(null=True, blank=True)

    # Selling price (snapshotted onto order lines)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    cost_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )

    min_stock_level = models.PositiveIntegerField(default=10)

    is_food_product = models.BooleanField(default=False)
    shelf_life_days = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Days from stock-in until a batch expires (food products only).",
    )

    # Ledger-managed cache; see products/services/batch_ledger.py
    current_stock = models.PositiveIntegerField(default=0, editable=False)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
            models.Index(fields=["current_stock"], name="product_current_stock_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(unit_price__gte=0),
                name="chk_product_unit_price_gte_zero",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        self.sku = (self.sku or "").strip().upper()
        if not self.sku:
            raise ValidationError({"sku": "SKU is required"})

        if self.unit_price is None or Decimal(self.unit_price) < 0:
            raise ValidationError({"unit_price": "Unit price must be non-negative"})

        if self.cost_price is not None and Decimal(self.cost_price) < 0:
            raise ValidationError({"cost_price": "Cost price must be non-negative"})

        if self.shelf_life_days is not None and self.shelf_life_days <= 0:
            raise ValidationError(
                {"shelf_life_days": "shelf_life_days must be greater than zero"}
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    @property
    def is_low_stock(self) -> bool:
        return int(self.current_stock or 0) <= int(self.min_stock_level or 0)
