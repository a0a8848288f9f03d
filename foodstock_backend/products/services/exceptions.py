# products/services/exceptions.py

"""
STOCK LEDGER DOMAIN ERRORS

Every rejected movement raises one of these BEFORE any batch or product
row is touched. Each error carries:
- code:        stable machine-readable kind (returned in API bodies)
- http_status: status the HTTP layer maps it to
"""

from __future__ import annotations


class StockLedgerError(Exception):
    code = "stock_error"
    http_status = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message())

    @classmethod
    def default_message(cls) -> str:
        return cls.__doc__.strip() if cls.__doc__ else cls.__name__

    @property
    def detail(self) -> str:
        return str(self)

    def extra(self) -> dict:
        return {}


# ------------------------------------------------------------
# NOT FOUND (404)
# ------------------------------------------------------------

class ProductNotFoundError(StockLedgerError):
    """Product not found"""

    code = "product_not_found"
    http_status = 404

    def __init__(self, product_id=None):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class BatchNotFoundError(StockLedgerError):
    """Specified batch not found or has no remaining stock"""

    code = "batch_not_found"
    http_status = 404

    def __init__(self, batch_id=None, message: str | None = None):
        self.batch_id = batch_id
        super().__init__(message)


class TransactionNotFoundError(StockLedgerError):
    """Transaction not found"""

    code = "transaction_not_found"
    http_status = 404

    def __init__(self, transaction_id=None):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


# ------------------------------------------------------------
# INVALID INPUT (400)
# ------------------------------------------------------------

class InvalidQuantityError(StockLedgerError, ValueError):
    """quantity must be a positive whole number"""

    code = "invalid_quantity"


class InvalidDirectionError(StockLedgerError, ValueError):
    """type must be 'in' or 'out'"""

    code = "invalid_direction"


class InvalidStatusError(StockLedgerError, ValueError):
    """status must be 'pending' or 'completed'"""

    code = "invalid_status"


class InvalidExpiryError(StockLedgerError, ValueError):
    """expiry_date must be a date or datetime"""

    code = "invalid_expiry"


class InvalidFieldLengthError(StockLedgerError, ValueError):
    """Value is too long"""

    code = "invalid_length"

    def __init__(self, field: str, max_length: int):
        self.field = field
        self.max_length = max_length
        super().__init__(f"{field} must be at most {max_length} characters")

    def extra(self) -> dict:
        return {"field": self.field, "max_length": self.max_length}


class DuplicateBatchNumberError(StockLedgerError):
    """Batch number already exists for this product"""

    code = "duplicate_batch_number"

    def __init__(self, batch_number: str, product_id=None):
        self.batch_number = batch_number
        self.product_id = product_id
        super().__init__(
            f"Batch number {batch_number} already exists for product {product_id}"
        )


# ------------------------------------------------------------
# CONFLICT (409)
# ------------------------------------------------------------

class InsufficientStockError(StockLedgerError):
    """Insufficient stock"""

    code = "insufficient_stock"
    http_status = 409

    def __init__(self, *, available: int, requested: int, label: str | None = None):
        self.available = int(available)
        self.requested = int(requested)
        self.label = label
        prefix = f"Insufficient stock for {label}" if label else "Insufficient stock"
        super().__init__(
            f"{prefix}. Available: {self.available}, Requested: {self.requested}"
        )

    def extra(self) -> dict:
        return {"available": self.available, "requested": self.requested}


class NotPendingError(StockLedgerError):
    """Only pending transactions can be processed or cancelled"""

    code = "not_pending"
    http_status = 409

    def __init__(self, transaction_id=None):
        self.transaction_id = transaction_id
        super().__init__()
