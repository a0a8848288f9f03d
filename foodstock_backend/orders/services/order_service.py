# orders/services/order_service.py

"""
======================================================
PATH: orders/services/order_service.py
======================================================
ORDER FULFILMENT (APPLICATION SERVICE)

Purpose:
- Turn order lines into FEFO stock-outs through the TransactionRecorder.
- Keep multi-line orders ALL-OR-NOTHING: every line is validated against
  available stock (quantities aggregated per product) BEFORE any stock moves.

Hard rules:
- Quantities are positive integer units.
- Totals are computed server-side: sum(unit_price * quantity), 2dp half-up.
- Every product in the order is locked (sorted id order) for the whole
  operation, so validation and consumption see the same stock.

Lifecycle:
- place_order(status="completed"): order + completed stock-out rows
- place_order(status="pending"):   order + pending stock-out rows (no stock effect)
- process_order:                   pending -> completed (all lines or none)
- cancel_order:                    pending -> cancelled (pending rows deleted)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP

from orders.models import Order, OrderItem
from products.models import Product
from products.services import TransactionRecorder, get_recorder
from products.services.batch_ledger import bounded_text, to_id, to_positive_quantity
from products.services.exceptions import (
    InsufficientStockError,
    InvalidStatusError,
    ProductNotFoundError,
    StockLedgerError,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
CUSTOMER_FIELD_MAX_LENGTH = 120


# ============================================================
# DOMAIN ERRORS
# ============================================================

class OrderError(StockLedgerError):
    """Order request rejected"""

    code = "order_error"


class EmptyOrderError(OrderError):
    """Order items are required"""

    code = "empty_order"


class OrderNotFoundError(OrderError):
    """Order not found"""

    code = "order_not_found"
    http_status = 404

    def __init__(self, order_id=None):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class OrderStateError(OrderError):
    """Order is not in a state that allows this operation"""

    code = "order_state"
    http_status = 409


# ============================================================
# HELPERS
# ============================================================

def _money(v) -> Decimal:
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _normalize_items(items) -> list[tuple[int, int]]:
    """
    Accepts [{"product_id": 1, "quantity": 2}, ...]
    (productId is accepted as an alias).
    """
    if not items:
        raise EmptyOrderError()

    lines = []
    for line in items:
        if not isinstance(line, dict):
            raise EmptyOrderError("Order items must be objects")
        raw_pid = line.get("product_id", line.get("productId"))
        pid = to_id(raw_pid, error=ProductNotFoundError)
        qty = to_positive_quantity(line.get("quantity"))
        lines.append((pid, qty))
    return lines


def _load_products(product_ids) -> dict:
    products = Product.objects.in_bulk(set(product_ids))
    for pid in product_ids:
        if pid not in products:
            raise ProductNotFoundError(pid)
    return products


def _prevalidate(recorder: TransactionRecorder, requirements: dict, products: dict) -> None:
    """
    requirements: {(product_id, target_batch_id | None): quantity}
    Raises InsufficientStockError for the first short line; nothing is written.
    """
    ordered = sorted(
        requirements.items(),
        key=lambda kv: (kv[0][0], kv[0][1] or 0),
    )
    for (pid, batch_id), needed in ordered:
        available = recorder.ledger.available_quantity(pid, batch_id)
        if available < needed:
            raise InsufficientStockError(
                available=available,
                requested=needed,
                label=products[pid].name,
            )


def _get_order(order_id) -> Order:
    oid = to_id(order_id, error=OrderNotFoundError)
    order = Order.objects.filter(pk=oid).first()
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


# ============================================================
# PLACE
# ============================================================

def place_order(
    *,
    items,
    status: str = Order.STATUS_PENDING,
    customer_name: str | None = None,
    customer_contact: str | None = None,
    notes: str | None = None,
    user_id=None,
    recorder: TransactionRecorder | None = None,
) -> Order:
    status = (status or Order.STATUS_PENDING).strip().lower()
    if status not in (Order.STATUS_PENDING, Order.STATUS_COMPLETED):
        raise InvalidStatusError()

    customer_name = bounded_text(
        customer_name, field="customer_name", max_length=CUSTOMER_FIELD_MAX_LENGTH
    ) or ""
    customer_contact = bounded_text(
        customer_contact, field="customer_contact", max_length=CUSTOMER_FIELD_MAX_LENGTH
    ) or ""

    lines = _normalize_items(items)
    recorder = recorder or get_recorder()
    product_ids = [pid for pid, _ in lines]

    with recorder.repository.lock_products(product_ids):
        products = _load_products(product_ids)

        if status == Order.STATUS_COMPLETED:
            requirements = defaultdict(int)
            for pid, qty in lines:
                requirements[(pid, None)] += qty
            _prevalidate(recorder, requirements, products)

        total = sum(
            (_money(products[pid].unit_price) * qty for pid, qty in lines),
            Decimal("0.00"),
        )

        order = Order(
            status=status,
            total_amount=_money(total),
            customer_name=customer_name,
            customer_contact=customer_contact,
            notes=(notes or "").strip(),
            created_by_id=user_id,
        )
        order.save()

        for pid, qty in lines:
            OrderItem.objects.create(
                order=order,
                product=products[pid],
                quantity=qty,
                unit_price=products[pid].unit_price,
            )

        for pid, qty in lines:
            recorder.record_movement(
                product_id=pid,
                direction="out",
                quantity=qty,
                reason=f"Order {order.order_number}",
                user_id=user_id,
                status=status,
                order_id=order.id,
            )

    logger.info(
        "Order placed",
        extra={
            "order_id": order.id,
            "order_number": order.order_number,
            "status": status,
            "lines": len(lines),
            "total_amount": str(order.total_amount),
        },
    )
    return order


# ============================================================
# LIFECYCLE
# ============================================================

def process_order(order_id, *, user_id=None, recorder: TransactionRecorder | None = None) -> Order:
    """
    Apply every pending stock-out of a pending order, or none of them.
    """
    recorder = recorder or get_recorder()
    order = _get_order(order_id)
    product_ids = list(order.items.values_list("product_id", flat=True))

    with recorder.repository.lock_products(product_ids):
        order = _get_order(order.id)
        if order.status != Order.STATUS_PENDING:
            raise OrderStateError(f"Order {order.order_number} is {order.status}")

        pending = sorted(
            recorder.list_movements(order_id=order.id, status="pending"),
            key=lambda t: t.id,
        )

        requirements = defaultdict(int)
        for txn in pending:
            requirements[(txn.product_id, txn.batch_id)] += int(txn.quantity)
        _prevalidate(recorder, requirements, _load_products(product_ids))

        for txn in pending:
            recorder.process_pending(txn.id, user_id=user_id)

        order.status = Order.STATUS_COMPLETED
        order.save(update_fields=["status"])

    logger.info(
        "Order processed",
        extra={"order_id": order.id, "order_number": order.order_number},
    )
    return order


def cancel_order(order_id, *, recorder: TransactionRecorder | None = None) -> Order:
    recorder = recorder or get_recorder()
    order = _get_order(order_id)
    product_ids = list(order.items.values_list("product_id", flat=True))

    with recorder.repository.lock_products(product_ids):
        order = _get_order(order.id)
        if order.status != Order.STATUS_PENDING:
            raise OrderStateError(
                f"Only pending orders can be cancelled; {order.order_number} is {order.status}"
            )

        for txn in recorder.list_movements(order_id=order.id, status="pending"):
            recorder.cancel_pending(txn.id)

        order.status = Order.STATUS_CANCELLED
        order.save(update_fields=["status"])

    logger.info(
        "Order cancelled",
        extra={"order_id": order.id, "order_number": order.order_number},
    )
    return order
