# orders/models/order_item.py

from decimal import Decimal

from django.db import models

from products.models import Product

from .order import Order


class OrderItem(models.Model):
    """One order line; unit_price is a snapshot of Product.unit_price."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="order_items"
    )
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ["id"]

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.unit_price) * int(self.quantity or 0)

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} x {self.quantity}"
