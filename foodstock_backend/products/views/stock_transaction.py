"""
======================================================
PATH: products/views/stock_transaction.py
======================================================
STOCK TRANSACTION VIEWSET

Endpoints:
- GET    /api/products/stock-transactions/?product_id=&status=
- POST   /api/products/stock-transactions/          record a movement
- POST   /api/products/stock-transactions/process/  {id} apply a pending one
- DELETE /api/products/stock-transactions/{id}/     cancel a pending one

RULES:
- All stock effects go through TransactionRecorder -> BatchLedger.
- Completed rows are never edited or deleted here.
- POST always answers with a LIST of rows (a stock-out may span batches).
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.serializers.stock_transaction import (
    ProcessPendingSerializer,
    StockMovementRequestSerializer,
    StockTransactionSerializer,
)
from products.services import get_recorder
from products.services.exceptions import StockLedgerError
from products.views.errors import stock_error_response


class StockTransactionViewSet(viewsets.GenericViewSet):
    serializer_class = StockTransactionSerializer
    permission_classes = [IsAuthenticated]

    def _user_id(self, request):
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            return user.pk
        return None

    # -------------------------------------------------
    # LIST
    # -------------------------------------------------
    @extend_schema(
        parameters=[
            OpenApiParameter(name="product_id", type=int, location=OpenApiParameter.QUERY),
            OpenApiParameter(
                name="status",
                type=str,
                location=OpenApiParameter.QUERY,
                enum=["pending", "completed"],
            ),
        ],
        responses={200: StockTransactionSerializer(many=True)},
    )
    def list(self, request):
        product_id = (request.query_params.get("product_id") or "").strip() or None
        status_filter = (request.query_params.get("status") or "").strip() or None

        try:
            rows = get_recorder().list_movements(
                product_id=product_id,
                status=status_filter,
            )
        except StockLedgerError as exc:
            return stock_error_response(exc)

        return Response(StockTransactionSerializer(rows, many=True).data)

    # -------------------------------------------------
    # RECORD
    # -------------------------------------------------
    @extend_schema(
        request=StockMovementRequestSerializer,
        responses={
            201: StockTransactionSerializer(many=True),
            400: OpenApiResponse(description="Invalid quantity / type / status"),
            404: OpenApiResponse(description="Product or batch not found"),
            409: OpenApiResponse(description="Insufficient stock"),
        },
    )
    def create(self, request):
        serializer = StockMovementRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        try:
            rows = get_recorder().record_movement(
                product_id=v["product_id"],
                direction=v["type"],
                quantity=v["quantity"],
                reason=v.get("reason"),
                batch_number=v.get("batch_number"),
                expiry_date=v.get("expiry_date"),
                target_batch_id=v.get("batch_id"),
                user_id=self._user_id(request),
                status=v.get("status") or "completed",
            )
        except StockLedgerError as exc:
            return stock_error_response(exc)

        return Response(
            StockTransactionSerializer(rows, many=True).data,
            status=status.HTTP_201_CREATED,
        )

    # -------------------------------------------------
    # PENDING LIFECYCLE
    # -------------------------------------------------
    @extend_schema(
        request=ProcessPendingSerializer,
        responses={
            200: StockTransactionSerializer(many=True),
            404: OpenApiResponse(description="Transaction not found"),
            409: OpenApiResponse(description="Not pending / insufficient stock"),
        },
    )
    @action(detail=False, methods=["post"], url_path="process")
    def process(self, request):
        raw_id = request.data.get("id") if hasattr(request.data, "get") else None
        if raw_id in (None, ""):
            return Response(
                {"detail": "Transaction ID is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = ProcessPendingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            rows = get_recorder().process_pending(
                serializer.validated_data["id"],
                user_id=self._user_id(request),
            )
        except StockLedgerError as exc:
            return stock_error_response(exc)

        return Response(StockTransactionSerializer(rows, many=True).data)

    @extend_schema(
        responses={
            200: OpenApiResponse(description="Pending transaction cancelled"),
            404: OpenApiResponse(description="Transaction not found"),
            409: OpenApiResponse(description="Transaction is not pending"),
        },
    )
    def destroy(self, request, pk=None):
        try:
            get_recorder().cancel_pending(pk)
        except StockLedgerError as exc:
            return stock_error_response(exc)

        return Response({"detail": "Transaction cancelled successfully"})
