# products/services/batch_ledger.py

"""
======================================================
PATH: products/services/batch_ledger.py
======================================================
BATCH LEDGER (FEFO STOCK ENGINE)

Purpose:
- Create one InventoryBatch per stock-in.
- Consume stock FEFO: earliest expiry first, undated batches last,
  ties broken by creation time then id.
- Re-derive Product.current_stock by a FULL RESUM of the product's batches
  after every mutation (never incremented/decremented in place).

RULES:
- Quantities are positive whole units (bool / fractions rejected).
- Availability is checked in full BEFORE any batch is decremented, so a
  rejected stock-out leaves no trace.
- Every mutation runs under repository.lock_products([product_id]).
- This is the ONLY writer of remaining_quantity and current_stock.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal
from typing import Callable, NamedTuple

from django.utils import timezone

from products.repositories.base import InventoryRepository

from .exceptions import (
    BatchNotFoundError,
    DuplicateBatchNumberError,
    InsufficientStockError,
    InvalidExpiryError,
    InvalidFieldLengthError,
    InvalidQuantityError,
    ProductNotFoundError,
)

logger = logging.getLogger(__name__)

# Upper bound of the PositiveIntegerField quantity columns.
MAX_QUANTITY = 2_147_483_647
BATCH_NUMBER_MAX_LENGTH = 128


# ============================================================
# NORMALIZERS
# ============================================================

def to_positive_quantity(value) -> int:
    """
    Quantity normalizer.
    HARD RULE: quantities are positive integer units in this system.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidQuantityError()

    if isinstance(value, int):
        qty = value
    elif isinstance(value, (float, Decimal)):
        if not math.isfinite(value) or value != int(value):
            raise InvalidQuantityError()
        qty = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        qty = int(value.strip())
    else:
        raise InvalidQuantityError()

    if qty <= 0 or qty > MAX_QUANTITY:
        raise InvalidQuantityError()
    return qty


def to_id(value, *, error: Callable[[object], Exception]) -> int:
    if isinstance(value, bool) or value is None:
        raise error(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise error(value)


def bounded_text(value, *, field: str, max_length: int) -> str | None:
    """Strip; blank -> None; longer than the column allows -> InvalidFieldLengthError."""
    text = (value or "").strip() if isinstance(value, str) else value
    if not text:
        return None
    text = str(text)
    if len(text) > max_length:
        raise InvalidFieldLengthError(field, max_length)
    return text


def as_aware_datetime(value) -> datetime | None:
    """
    Expiry normalizer.
    - date      -> midnight (current timezone)
    - naive dt  -> made aware in the current timezone
    - aware dt  -> unchanged
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            return timezone.make_aware(value)
        return value
    if isinstance(value, date):
        return timezone.make_aware(datetime.combine(value, time.min))
    raise InvalidExpiryError()


def fefo_key(batch):
    """(undated last, expiry ascending, created_at, id)"""
    expiry = batch.expiry_date
    return (
        expiry is None,
        expiry or datetime.min.replace(tzinfo=dt_timezone.utc),
        batch.created_at,
        batch.id,
    )


def days_until(expiry: datetime, now: datetime) -> int:
    """Whole days left, rounded up; negative once expired."""
    return math.ceil((expiry - now) / timedelta(days=1))


class Allocation(NamedTuple):
    batch: object
    taken: int


# ============================================================
# LEDGER
# ============================================================

class BatchLedger:
    def __init__(
        self,
        repository: InventoryRepository,
        *,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.repository = repository
        self.clock = clock

    # -------------------------------------------------
    # HELPERS
    # -------------------------------------------------

    def _require_product(self, product_id):
        pid = to_id(product_id, error=ProductNotFoundError)
        product = self.repository.get_product(pid)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def _generate_batch_number(self, now: datetime) -> str:
        seq = self.repository.next_batch_sequence()
        return f"B{seq}-{int(now.timestamp() * 1000)}"

    def _default_expiry(self, product, now: datetime) -> datetime | None:
        if product.is_food_product and product.shelf_life_days:
            return now + timedelta(days=int(product.shelf_life_days))
        return None

    # -------------------------------------------------
    # STOCK-IN
    # -------------------------------------------------

    def create_batch(
        self,
        *,
        product_id,
        quantity,
        expiry_date=None,
        batch_number: str | None = None,
        user_id=None,
    ):
        """
        Record a stock-in as a new batch and resum the product's stock.

        Expiry resolution:
        - explicit expiry_date wins (operator override, past dates allowed)
        - else food product with shelf_life_days: now + shelf_life_days
        - else NULL (non-perishable)
        """
        qty = to_positive_quantity(quantity)
        explicit_expiry = as_aware_datetime(expiry_date)
        requested_number = bounded_text(
            batch_number, field="batch_number", max_length=BATCH_NUMBER_MAX_LENGTH
        )

        pid = to_id(product_id, error=ProductNotFoundError)
        with self.repository.lock_products([pid]):
            product = self._require_product(pid)
            now = self.clock()

            if explicit_expiry is not None:
                expiry = explicit_expiry
                if expiry < now:
                    logger.warning(
                        "Stock-in booked with an expiry date in the past",
                        extra={"product_id": product.id, "expiry_date": expiry.isoformat()},
                    )
            else:
                expiry = self._default_expiry(product, now)

            if requested_number is not None:
                if self.repository.batch_number_exists(product.id, requested_number):
                    logger.warning(
                        "Rejected duplicate batch number",
                        extra={"product_id": product.id, "batch_number": requested_number},
                    )
                    raise DuplicateBatchNumberError(requested_number, product.id)
                number = requested_number
            else:
                number = self._generate_batch_number(now)

            batch = self.repository.add_batch(
                product_id=product.id,
                batch_number=number,
                quantity=qty,
                expiry_date=expiry,
                created_at=now,
                created_by_id=user_id,
            )
            stock = self.recompute_stock(product.id)

        logger.info(
            "Batch created",
            extra={
                "product_id": product.id,
                "batch_id": batch.id,
                "batch_number": number,
                "quantity": qty,
                "current_stock": stock,
            },
        )
        return batch

    # -------------------------------------------------
    # STOCK-OUT
    # -------------------------------------------------

    def active_batches(self, product_id) -> list:
        """Batches with stock left, in FEFO consumption order."""
        return sorted(
            self.repository.list_batches(product_id, active_only=True),
            key=fefo_key,
        )

    def _target_batch(self, product, target_batch_id):
        bid = to_id(target_batch_id, error=BatchNotFoundError)
        batch = self.repository.get_batch(bid)
        if (
            batch is None
            or batch.product_id != product.id
            or int(batch.remaining_quantity) <= 0
        ):
            raise BatchNotFoundError(target_batch_id)
        return batch

    def available_quantity(self, product_id, target_batch_id=None) -> int:
        product = self._require_product(product_id)
        if target_batch_id is not None:
            return int(self._target_batch(product, target_batch_id).remaining_quantity)
        return sum(int(b.remaining_quantity) for b in self.active_batches(product.id))

    def consume(self, *, product_id, quantity, target_batch_id=None) -> list[Allocation]:
        """
        Take `quantity` units out of the product's batches.

        - with target_batch_id: all of it from that one active batch
        - without: greedy FEFO across active batches

        Returns [(batch, taken), ...] in consumption order.
        """
        qty = to_positive_quantity(quantity)

        pid = to_id(product_id, error=ProductNotFoundError)
        with self.repository.lock_products([pid]):
            product = self._require_product(pid)

            if target_batch_id is not None:
                candidates = [self._target_batch(product, target_batch_id)]
            else:
                candidates = self.active_batches(product.id)

            available = sum(int(b.remaining_quantity) for b in candidates)
            if available < qty:
                logger.warning(
                    "Rejected stock-out: insufficient stock",
                    extra={
                        "product_id": product.id,
                        "target_batch_id": target_batch_id,
                        "available": available,
                        "requested": qty,
                    },
                )
                if target_batch_id is not None:
                    raise InsufficientStockError(
                        available=available,
                        requested=qty,
                        label=f"batch {candidates[0].batch_number}",
                    )
                raise InsufficientStockError(
                    available=available,
                    requested=qty,
                    label=product.name,
                )

            allocations: list[Allocation] = []
            to_consume = qty
            for batch in candidates:
                if to_consume <= 0:
                    break
                on_hand = int(batch.remaining_quantity)
                taken = min(to_consume, on_hand)
                self.repository.set_batch_remaining(batch, on_hand - taken)
                allocations.append(Allocation(batch=batch, taken=taken))
                to_consume -= taken

            stock = self.recompute_stock(product.id)

        logger.info(
            "Stock consumed",
            extra={
                "product_id": product.id,
                "quantity": qty,
                "batches": [a.batch.id for a in allocations],
                "current_stock": stock,
            },
        )
        return allocations

    # -------------------------------------------------
    # AGGREGATE STOCK
    # -------------------------------------------------

    def recompute_stock(self, product_id) -> int:
        """Full resum of remaining quantities, persisted to the product."""
        pid = to_id(product_id, error=ProductNotFoundError)
        with self.repository.lock_products([pid]):
            if self.repository.get_product(pid) is None:
                raise ProductNotFoundError(product_id)
            total = self.repository.sum_remaining(pid)
            self.repository.set_current_stock(pid, total)
        return total

    def find_stock_drift(self) -> list[tuple]:
        """
        Products whose cached current_stock disagrees with their batches.
        Returns [(product, cached, actual), ...]; read-only.
        """
        drift = []
        for product in self.repository.list_products():
            actual = self.repository.sum_remaining(product.id)
            cached = int(product.current_stock or 0)
            if cached != actual:
                logger.warning(
                    "Stock drift detected",
                    extra={"product_id": product.id, "cached": cached, "actual": actual},
                )
                drift.append((product, cached, actual))
        return drift
