# products/views/inventory_batch.py

"""
INVENTORY BATCH VIEWSET (READ-ONLY)

Endpoints:
- GET /api/products/inventory-batches/?product_id=&include_exhausted=
- GET /api/products/inventory-batches/{id}/
- GET /api/products/inventory-batches/product/{product_id}/   FEFO order
- GET /api/products/inventory-batches/expiring/?days=30

Batches are created and consumed through stock transactions only.
"""

from __future__ import annotations

from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.models import InventoryBatch
from products.serializers.inventory_batch import (
    ExpiringBatchSerializer,
    InventoryBatchSerializer,
)
from products.services import get_queries
from products.services.exceptions import StockLedgerError
from products.views.errors import query_bool, query_int, stock_error_response


class InventoryBatchViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = InventoryBatchSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = InventoryBatch.objects.select_related("product").order_by(
            "product_id", "expiry_date", "created_at", "id"
        )

        product_id = (self.request.query_params.get("product_id") or "").strip()
        if product_id:
            qs = qs.filter(product_id=product_id) if product_id.isdigit() else qs.none()

        if not query_bool(self.request, "include_exhausted", default=True):
            qs = qs.filter(remaining_quantity__gt=0)

        return qs

    @extend_schema(
        parameters=[
            OpenApiParameter(name="include_exhausted", type=bool, location=OpenApiParameter.QUERY),
        ],
        responses={
            200: InventoryBatchSerializer(many=True),
            404: OpenApiResponse(description="Product not found"),
        },
    )
    @action(detail=False, methods=["get"], url_path=r"product/(?P<product_id>[^/.]+)")
    def for_product(self, request, product_id=None):
        include_exhausted = query_bool(request, "include_exhausted", default=True)
        try:
            batches = get_queries().batches_for_product(
                product_id,
                include_exhausted=include_exhausted,
            )
        except StockLedgerError as exc:
            return stock_error_response(exc)

        return Response(InventoryBatchSerializer(batches, many=True).data)

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="days",
                type=int,
                location=OpenApiParameter.QUERY,
                description="Look-ahead window in days (defaults to INVENTORY_EXPIRY_WINDOW_DAYS).",
            ),
        ],
        responses={
            200: ExpiringBatchSerializer(many=True),
            400: OpenApiResponse(description="Invalid days"),
        },
    )
    @action(detail=False, methods=["get"], url_path="expiring")
    def expiring(self, request):
        try:
            days = query_int(request, "days", default=settings.INVENTORY_EXPIRY_WINDOW_DAYS)
            rows = get_queries().expiring_batches(days)
        except ValueError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExpiringBatchSerializer(rows, many=True).data)
