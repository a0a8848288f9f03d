# products/serializers/inventory_batch.py

"""
INVENTORY BATCH SERIALIZERS (READ-ONLY)

Batches are created and consumed ONLY through stock transactions, so these
serializers never accept input.
"""

from __future__ import annotations

from rest_framework import serializers

from products.models import InventoryBatch


class InventoryBatchSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    is_exhausted = serializers.BooleanField(read_only=True)

    class Meta:
        model = InventoryBatch
        fields = [
            "id",
            "product_id",
            "product_name",
            "batch_number",
            "quantity",
            "remaining_quantity",
            "expiry_date",
            "is_exhausted",
            "created_at",
            "created_by",
        ]
        read_only_fields = fields


class ExpiringBatchSerializer(serializers.Serializer):
    """Flattens aggregation.ExpiringBatch (batch + product_name + days left)."""

    id = serializers.IntegerField(source="batch.id")
    product_id = serializers.IntegerField(source="batch.product_id")
    product_name = serializers.CharField()
    batch_number = serializers.CharField(source="batch.batch_number")
    quantity = serializers.IntegerField(source="batch.quantity")
    remaining_quantity = serializers.IntegerField(source="batch.remaining_quantity")
    expiry_date = serializers.DateTimeField(source="batch.expiry_date")
    created_at = serializers.DateTimeField(source="batch.created_at")
    days_until_expiry = serializers.IntegerField()
