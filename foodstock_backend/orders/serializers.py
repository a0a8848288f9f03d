# orders/serializers.py

"""
ORDER SERIALIZERS

- OrderCreateSerializer: request shape only; stock + totals are computed
  by orders.services.place_order.
- OrderSerializer: read-only view of an order with its lines and the
  stock transactions it produced.
"""

from __future__ import annotations

from rest_framework import serializers

from orders.models import Order, OrderItem
from products.serializers import StockTransactionSerializer


class OrderLineInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.JSONField()

    def to_internal_value(self, data):
        if isinstance(data, dict) and "product_id" not in data and "productId" in data:
            data = {**data, "product_id": data["productId"]}
        return super().to_internal_value(data)


class OrderCreateSerializer(serializers.Serializer):
    items = OrderLineInputSerializer(many=True, allow_empty=True)
    status = serializers.ChoiceField(
        choices=[Order.STATUS_PENDING, Order.STATUS_COMPLETED],
        required=False,
        default=Order.STATUS_PENDING,
    )
    customer_name = serializers.CharField(required=False, allow_blank=True, max_length=120)
    customer_contact = serializers.CharField(required=False, allow_blank=True, max_length=120)
    notes = serializers.CharField(required=False, allow_blank=True)

    def to_internal_value(self, data):
        if isinstance(data, dict):
            aliases = {"customerName": "customer_name", "customerContact": "customer_contact"}
            data = {**data}
            for alias, name in aliases.items():
                if alias in data and name not in data:
                    data[name] = data.pop(alias)
        return super().to_internal_value(data)


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product", "product_name", "quantity", "unit_price", "line_total"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    stock_transactions = StockTransactionSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "total_amount",
            "customer_name",
            "customer_contact",
            "notes",
            "order_date",
            "created_by",
            "items",
            "stock_transactions",
        ]
        read_only_fields = fields
