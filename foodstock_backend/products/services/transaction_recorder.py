# products/services/transaction_recorder.py

"""
======================================================
PATH: products/services/transaction_recorder.py
======================================================
TRANSACTION RECORDER (AUDIT TRAIL OF STOCK MOVEMENTS)

Purpose:
- Validate a requested movement, apply it through the BatchLedger and write
  the audit row(s).
- Pending movements (e.g. supplier orders awaiting receipt) are recorded
  WITHOUT touching stock and applied later via process_pending().

ROW SHAPE:
- stock-in:  exactly one row (the new batch)
- stock-out: one row per batch touched, each with its partial quantity
- every row written by one call shares a correlation_id
- record_movement() and process_pending() ALWAYS return a list

ATOMICITY:
- The ledger change and the audit rows are written inside the same
  repository.lock_products() block; a failure rolls both back (ORM).
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from django.utils import timezone

from products.repositories.base import InventoryRepository

from .batch_ledger import (
    BATCH_NUMBER_MAX_LENGTH,
    BatchLedger,
    as_aware_datetime,
    bounded_text,
    to_id,
    to_positive_quantity,
)
from .exceptions import (
    BatchNotFoundError,
    InvalidDirectionError,
    InvalidStatusError,
    NotPendingError,
    ProductNotFoundError,
    TransactionNotFoundError,
)

logger = logging.getLogger(__name__)

IN = "in"
OUT = "out"
PENDING = "pending"
COMPLETED = "completed"

REASON_MAX_LENGTH = 255

DIRECTIONS = {IN, OUT}
STATUSES = {PENDING, COMPLETED}


def normalize_direction(value) -> str:
    direction = (value or "").strip().lower() if isinstance(value, str) else value
    if direction not in DIRECTIONS:
        raise InvalidDirectionError()
    return direction


def normalize_status(value) -> str:
    if value is None or value == "":
        return COMPLETED
    status = value.strip().lower() if isinstance(value, str) else value
    if status not in STATUSES:
        raise InvalidStatusError()
    return status


class TransactionRecorder:
    def __init__(
        self,
        repository: InventoryRepository,
        *,
        ledger: BatchLedger | None = None,
        clock: Callable | None = None,
    ):
        self.repository = repository
        self.clock = clock or (ledger.clock if ledger else timezone.now)
        self.ledger = ledger or BatchLedger(repository, clock=self.clock)

    # -------------------------------------------------
    # LEDGER EFFECT
    # -------------------------------------------------

    def _apply(
        self,
        *,
        product_id: int,
        direction: str,
        quantity: int,
        batch_number=None,
        expiry_date=None,
        target_batch_id=None,
        user_id=None,
    ) -> list[dict]:
        """
        Run the ledger effect and return one row dict per batch touched:
        [{"quantity", "batch_id", "batch_number", "expiry_date"}, ...]
        """
        if direction == IN:
            batch = self.ledger.create_batch(
                product_id=product_id,
                quantity=quantity,
                expiry_date=expiry_date,
                batch_number=batch_number,
                user_id=user_id,
            )
            return [
                {
                    "quantity": quantity,
                    "batch_id": batch.id,
                    "batch_number": batch.batch_number,
                    "expiry_date": batch.expiry_date,
                }
            ]

        allocations = self.ledger.consume(
            product_id=product_id,
            quantity=quantity,
            target_batch_id=target_batch_id,
        )
        return [
            {
                "quantity": taken,
                "batch_id": batch.id,
                "batch_number": batch.batch_number,
                "expiry_date": batch.expiry_date,
            }
            for batch, taken in allocations
        ]

    # -------------------------------------------------
    # RECORD
    # -------------------------------------------------

    def record_movement(
        self,
        *,
        product_id,
        direction,
        quantity,
        reason: str | None = None,
        batch_number: str | None = None,
        expiry_date=None,
        target_batch_id=None,
        user_id=None,
        status: str = COMPLETED,
        order_id=None,
    ) -> list:
        direction = normalize_direction(direction)
        status = normalize_status(status)
        qty = to_positive_quantity(quantity)
        pid = to_id(product_id, error=ProductNotFoundError)
        expiry = as_aware_datetime(expiry_date)
        reason = bounded_text(reason, field="reason", max_length=REASON_MAX_LENGTH)
        batch_number = bounded_text(
            batch_number, field="batch_number", max_length=BATCH_NUMBER_MAX_LENGTH
        )
        correlation_id = uuid.uuid4()

        base = {
            "product_id": pid,
            "type": direction,
            "reason": reason,
            "user_id": user_id,
            "correlation_id": correlation_id,
            "order_id": order_id,
        }

        with self.repository.lock_products([pid]):
            if self.repository.get_product(pid) is None:
                raise ProductNotFoundError(product_id)

            if status == PENDING:
                row = self._pending_row(
                    base=base,
                    quantity=qty,
                    batch_number=batch_number,
                    expiry_date=expiry,
                    target_batch_id=target_batch_id,
                )
                rows = [row]
            else:
                now = self.clock()
                slices = self._apply(
                    product_id=pid,
                    direction=direction,
                    quantity=qty,
                    batch_number=batch_number,
                    expiry_date=expiry,
                    target_batch_id=target_batch_id,
                    user_id=user_id,
                )
                rows = [
                    self.repository.add_transaction(
                        **base,
                        **part,
                        status=COMPLETED,
                        timestamp=now,
                    )
                    for part in slices
                ]

        logger.info(
            "Stock movement recorded",
            extra={
                "product_id": pid,
                "type": direction,
                "status": status,
                "quantity": qty,
                "rows": len(rows),
                "correlation_id": str(correlation_id),
            },
        )
        return rows

    def _pending_row(self, *, base, quantity, batch_number, expiry_date, target_batch_id):
        batch_id = None
        if base["type"] == OUT and target_batch_id is not None:
            bid = to_id(target_batch_id, error=BatchNotFoundError)
            target = self.repository.get_batch(bid)
            if target is None or target.product_id != base["product_id"]:
                raise BatchNotFoundError(target_batch_id)
            batch_id = target.id
            batch_number = target.batch_number
            expiry_date = target.expiry_date

        return self.repository.add_transaction(
            **base,
            quantity=quantity,
            batch_id=batch_id,
            batch_number=batch_number,
            expiry_date=expiry_date,
            status=PENDING,
            timestamp=self.clock(),
        )

    # -------------------------------------------------
    # PENDING LIFECYCLE
    # -------------------------------------------------

    def _require_pending(self, transaction_id):
        tid = to_id(transaction_id, error=TransactionNotFoundError)
        txn = self.repository.get_transaction(tid)
        if txn is None:
            raise TransactionNotFoundError(transaction_id)
        if txn.status != PENDING:
            raise NotPendingError(transaction_id)
        return txn

    def process_pending(self, transaction_id, *, user_id=None) -> list:
        """
        Apply a pending movement.

        The original row becomes the first completed audit row; extra batch
        slices of a multi-batch stock-out are appended as new completed rows
        sharing its correlation_id. On any ledger error the row stays pending.
        """
        txn = self._require_pending(transaction_id)

        with self.repository.lock_products([txn.product_id]):
            # Re-read under the lock: another caller may have won the race.
            txn = self._require_pending(txn.id)
            now = self.clock()
            acting_user = user_id if user_id is not None else txn.user_id

            slices = self._apply(
                product_id=txn.product_id,
                direction=txn.type,
                quantity=int(txn.quantity),
                batch_number=txn.batch_number if txn.type == IN else None,
                expiry_date=txn.expiry_date if txn.type == IN else None,
                target_batch_id=txn.batch_id if txn.type == OUT else None,
                user_id=acting_user,
            )

            first, *rest = slices
            self.repository.update_transaction(
                txn,
                status=COMPLETED,
                timestamp=now,
                user_id=acting_user,
                **first,
            )
            rows = [txn]
            for part in rest:
                rows.append(
                    self.repository.add_transaction(
                        product_id=txn.product_id,
                        type=txn.type,
                        reason=txn.reason,
                        user_id=acting_user,
                        correlation_id=txn.correlation_id,
                        order_id=txn.order_id,
                        status=COMPLETED,
                        timestamp=now,
                        **part,
                    )
                )

        logger.info(
            "Pending stock movement processed",
            extra={
                "transaction_id": txn.id,
                "product_id": txn.product_id,
                "rows": len(rows),
            },
        )
        return rows

    def cancel_pending(self, transaction_id) -> None:
        txn = self._require_pending(transaction_id)
        with self.repository.lock_products([txn.product_id]):
            txn = self._require_pending(txn.id)
            self.repository.delete_transaction(txn)

        logger.info(
            "Pending stock movement cancelled",
            extra={"transaction_id": transaction_id, "product_id": txn.product_id},
        )

    # -------------------------------------------------
    # QUERIES
    # -------------------------------------------------

    def list_movements(self, *, product_id=None, status=None, order_id=None) -> list:
        if product_id is not None:
            product_id = to_id(product_id, error=ProductNotFoundError)
        if status is not None:
            status = normalize_status(status)
        return self.repository.list_transactions(
            product_id=product_id,
            status=status,
            order_id=order_id,
        )
