# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe inventory):

- Products and categories are editable; current_stock is read-only
  (ledger-maintained cache).
- Stock arrives only through the batch ledger (stock-transactions API or
  `seed_inventory`), never through admin forms.
- InventoryBatch and StockTransaction rows are audit artifacts:
  view-only, never edited or deleted from admin.
"""

from __future__ import annotations

from datetime import timedelta

from django.conf import settings
from django.contrib import admin
from django.utils import timezone

from products.models import Category, InventoryBatch, Product, StockTransaction


# =====================================================
# CATEGORY
# =====================================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name",)
    search_fields = ("name",)
    ordering = ("name",)


# =====================================================
# BATCH INLINE (VIEW-ONLY)
# =====================================================

class InventoryBatchInline(admin.TabularInline):
    model = InventoryBatch
    extra = 0
    can_delete = False
    show_change_link = False

    fields = (
        "batch_number",
        "expiry_date",
        "quantity",
        "remaining_quantity",
        "created_at",
    )
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


# =====================================================
# PRODUCT
# =====================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name",
        "category",
        "unit_price",
        "current_stock",
        "is_low_stock",
        "is_food_product",
        "is_active",
        "created_at",
    )
    list_filter = ("is_active", "is_food_product", "category", "created_at")
    search_fields = ("sku", "name")
    ordering = ("-created_at",)
    readonly_fields = ("current_stock", "created_at", "updated_at")

    inlines = [InventoryBatchInline]

    @admin.display(boolean=True, description="Low stock")
    def is_low_stock(self, obj):
        return obj.is_low_stock


# =====================================================
# INVENTORY BATCH (VIEW-ONLY LIST)
# =====================================================

@admin.register(InventoryBatch)
class InventoryBatchAdmin(admin.ModelAdmin):
    list_display = (
        "product",
        "batch_number",
        "expiry_date",
        "quantity",
        "remaining_quantity",
        "expiry_status",
        "created_at",
    )
    list_filter = ("expiry_date", "created_at")
    search_fields = ("batch_number", "product__name", "product__sku")
    ordering = ("expiry_date", "created_at")

    readonly_fields = (
        "product",
        "batch_number",
        "expiry_date",
        "quantity",
        "remaining_quantity",
        "created_at",
        "created_by",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description="Expiry Status")
    def expiry_status(self, obj):
        if obj.expiry_date is None:
            return "-"

        now = timezone.now()
        if obj.expiry_date < now:
            return "EXPIRED"
        if obj.expiry_date <= now + timedelta(days=settings.INVENTORY_EXPIRY_WINDOW_DAYS):
            return "SOON"
        return "OK"


# =====================================================
# STOCK TRANSACTION (VIEW-ONLY LIST)
# =====================================================

@admin.register(StockTransaction)
class StockTransactionAdmin(admin.ModelAdmin):
    list_display = (
        "timestamp",
        "product",
        "type",
        "quantity",
        "batch_number",
        "status",
        "reason",
        "user",
    )
    list_filter = ("type", "status", "timestamp")
    search_fields = ("product__name", "product__sku", "batch_number", "reason")
    ordering = ("-timestamp", "-id")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
