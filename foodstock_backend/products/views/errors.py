# products/views/errors.py

"""
DOMAIN ERROR -> HTTP RESPONSE

Single mapping point for StockLedgerError (and its order subclasses):
- not-found kinds          -> 404
- invalid input kinds      -> 400
- insufficient / state     -> 409

Body: {"detail": <message>, "code": <kind>, ...extra}
"""

from __future__ import annotations

import logging

from rest_framework.response import Response

from products.services.exceptions import StockLedgerError

logger = logging.getLogger(__name__)


def stock_error_response(exc: StockLedgerError) -> Response:
    if exc.http_status >= 409:
        logger.info(
            "Stock request rejected",
            extra={"code": exc.code, "detail": exc.detail},
        )
    body = {"detail": exc.detail, "code": exc.code}
    body.update(exc.extra())
    return Response(body, status=exc.http_status)


def query_int(request, name: str, default: int | None = None) -> int | None:
    """
    Parse a non-negative integer query param.
    Raises ValueError with an API-ready message.
    """
    raw = (request.query_params.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be a non-negative integer") from None
    if value < 0:
        raise ValueError(f"{name} must be a non-negative integer")
    return value


def query_bool(request, name: str, default: bool) -> bool:
    raw = (request.query_params.get(name) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes")
