# products/serializers/product.py

"""
PRODUCT SERIALIZER

Purpose:
- Canonical Product serializer for staff CRUD.
- current_stock is READ-ONLY: it is the ledger's cached sum of batch
  remaining quantities and is never written through the API.
"""

from rest_framework import serializers

from products.models import Category, Product


class ProductSerializer(serializers.ModelSerializer):
    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )
    category_name = serializers.CharField(source="category.name", read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "description",
            "category",
            "category_name",
            "unit_price",
            "cost_price",
            "min_stock_level",
            "is_food_product",
            "shelf_life_days",
            "current_stock",
            "is_low_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "category_name",
            "current_stock",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        if not value:
            raise serializers.ValidationError("SKU is required")
        return value

    def validate_unit_price(self, value):
        if value is None or value < 0:
            raise serializers.ValidationError("Unit price must be non-negative")
        return value

    def validate(self, attrs):
        is_food = attrs.get(
            "is_food_product",
            getattr(self.instance, "is_food_product", False),
        )
        shelf_life = attrs.get(
            "shelf_life_days",
            getattr(self.instance, "shelf_life_days", None),
        )
        if shelf_life is not None and not is_food:
            raise serializers.ValidationError(
                {"shelf_life_days": "shelf_life_days only applies to food products"}
            )
        return attrs
