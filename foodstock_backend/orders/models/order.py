# orders/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


def generate_order_number() -> str:
    millis = int(timezone.now().timestamp() * 1000)
    return f"ORD-{millis}-{uuid.uuid4().hex[:6].upper()}"


class Order(models.Model):
    """
    Customer order.

    LIFECYCLE:
    - pending   -> completed (process: all lines applied together)
    - pending   -> cancelled (pending stock-out rows deleted)
    - completed / cancelled are terminal

    Stock is NEVER touched here directly: every line is a stock-out recorded
    through the TransactionRecorder and linked back via order_id.
    """

    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    TERMINAL_STATES = {STATUS_COMPLETED, STATUS_CANCELLED}

    order_number = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated order number",
    )

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    customer_name = models.CharField(max_length=120, blank=True, default="")
    customer_contact = models.CharField(max_length=120, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    order_date = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-order_date", "-id"]
        indexes = [
            models.Index(fields=["status"], name="order_status_idx"),
            models.Index(fields=["order_date"], name="order_date_idx"),
        ]

    def __str__(self):
        return f"{self.order_number} ({self.status})"

    def save(self, *args, **kwargs):
        if not self.order_number:
            self.order_number = generate_order_number()

        if not self._state.adding:
            previous = (
                Order.objects.filter(pk=self.pk).values_list("status", flat=True).first()
            )
            if previous in self.TERMINAL_STATES and previous != self.status:
                raise ValidationError(
                    {"status": f"Order is {previous}; status can no longer change"}
                )

        self.full_clean()
        super().save(*args, **kwargs)
