from .order_service import (
    EmptyOrderError,
    OrderError,
    OrderNotFoundError,
    OrderStateError,
    cancel_order,
    place_order,
    process_order,
)

__all__ = [
    "EmptyOrderError",
    "OrderError",
    "OrderNotFoundError",
    "OrderStateError",
    "cancel_order",
    "place_order",
    "process_order",
]
