# products/serializers/stock_transaction.py
"""
======================================================
PATH: products/serializers/stock_transaction.py
======================================================
STOCK TRANSACTION SERIALIZERS

Request side (StockMovementRequestSerializer):
- Accepts BOTH camelCase (frontend) and snake_case keys:
    productId / product_id, batchNumber / batch_number,
    expiryDate / expiry_date, batchId / batch_id
- Only SHAPE is checked here (presence, date parsing).
  Quantity / type / status rules belong to the TransactionRecorder so the
  API reports them with the same error codes as every other caller.

Response side (StockTransactionSerializer): read-only audit rows.
"""

from __future__ import annotations

from rest_framework import serializers

from products.models import StockTransaction

DATE_INPUT_FORMATS = ["iso-8601", "%Y-%m-%d"]

ALIASES = {
    "productId": "product_id",
    "batchNumber": "batch_number",
    "expiryDate": "expiry_date",
    "batchId": "batch_id",
}


class StockMovementRequestSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    type = serializers.CharField()
    quantity = serializers.JSONField()
    reason = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=255,
    )
    batch_number = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=128,
    )
    expiry_date = serializers.DateTimeField(
        required=False,
        allow_null=True,
        input_formats=DATE_INPUT_FORMATS,
    )
    batch_id = serializers.IntegerField(required=False, allow_null=True)
    status = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def to_internal_value(self, data):
        if hasattr(data, "dict"):
            data = data.dict()
        else:
            data = dict(data)
        for camel, snake in ALIASES.items():
            if camel in data and snake not in data:
                data[snake] = data.pop(camel)
        return super().to_internal_value(data)


class ProcessPendingSerializer(serializers.Serializer):
    id = serializers.IntegerField()


class StockTransactionSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    batch_id = serializers.IntegerField(read_only=True, allow_null=True)
    user_id = serializers.IntegerField(read_only=True, allow_null=True)
    order_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = StockTransaction
        fields = [
            "id",
            "product_id",
            "product_name",
            "type",
            "quantity",
            "reason",
            "user_id",
            "timestamp",
            "batch_id",
            "batch_number",
            "expiry_date",
            "status",
            "correlation_id",
            "order_id",
        ]
        read_only_fields = fields
