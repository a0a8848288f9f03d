# products/models/inventory_batch.py

"""
INVENTORY BATCH (ONE STOCK-IN EVENT)

Represents ONE receipt of stock for a product.

RULES:
- quantity is the original received amount and is immutable
- remaining_quantity is mutated ONLY by the batch ledger
- 0 <= remaining_quantity <= quantity (model + DB constraints)
- expiry_date is nullable: NULL = non-perishable / unknown, sorts last in FEFO
- batch_number is unique per product
- Batches are audit artifacts and are never deleted
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from .product import Product


class InventoryBatch(models.Model):
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="batches",
    )

    batch_number = models.CharField(
        max_length=128,
        help_text="Supplier reference or generated B<seq>-<epoch ms>",
    )

    quantity = models.PositiveIntegerField(help_text="Quantity received (immutable)")

    remaining_quantity = models.PositiveIntegerField(
        help_text="Remaining quantity (ledger-managed only)",
    )

    expiry_date = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField()

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="inventory_batches",
    )

    class Meta:
        ordering = ["expiry_date", "created_at", "id"]
        verbose_name_plural = "inventory batches"
        indexes = [
            models.Index(fields=["product", "expiry_date"], name="batch_product_expiry_idx"),
            models.Index(
                fields=["product", "remaining_quantity"],
                name="batch_product_remaining_idx",
            ),
            models.Index(fields=["expiry_date"], name="batch_expiry_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "batch_number"],
                name="unique_batch_number_per_product",
            ),
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_batch_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(remaining_quantity__gte=0),
                name="chk_batch_remaining_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(remaining_quantity__lte=F("quantity")),
                name="chk_batch_remaining_lte_quantity",
            ),
        ]

    # -------------------------------------------------
    # VALIDATION
    # -------------------------------------------------

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError({"quantity": "quantity must be greater than zero"})

        if self.remaining_quantity is None or self.remaining_quantity < 0:
            raise ValidationError(
                {"remaining_quantity": "remaining_quantity cannot be negative"}
            )

        if self.remaining_quantity > self.quantity:
            raise ValidationError(
                {"remaining_quantity": "remaining_quantity cannot exceed quantity"}
            )

        if not (self.batch_number or "").strip():
            raise ValidationError({"batch_number": "batch_number is required"})

    # -------------------------------------------------
    # IMMUTABILITY
    # -------------------------------------------------

    def save(self, *args, **kwargs):
        if not self._state.adding:
            original = InventoryBatch.objects.only(
                "quantity", "product_id", "batch_number"
            ).get(pk=self.pk)

            if self.quantity != original.quantity:
                raise ValidationError({"quantity": "quantity is immutable"})
            if self.product_id != original.product_id:
                raise ValidationError({"product": "product is immutable"})
            if self.batch_number != original.batch_number:
                raise ValidationError({"batch_number": "batch_number is immutable"})

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "InventoryBatch records are audit artifacts and cannot be deleted"
        )

    @property
    def is_exhausted(self) -> bool:
        return int(self.remaining_quantity or 0) == 0

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | Batch {self.batch_number}"
