# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Staff product management endpoints (CRUD + low-stock alert)

Key rule alignment:
- current_stock is served from the ledger-maintained cache and is read-only.
- Products with batch or transaction history cannot be deleted
  (deactivate them instead).
"""

from django.conf import settings
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from products.models import Product
from products.serializers.product import ProductSerializer
from products.services import get_queries
from products.views.errors import query_int


class ProductViewSet(viewsets.ModelViewSet):
    """
    Product endpoints.

    - CRUD
    - GET alerts/low-stock/?threshold=<int>
    """

    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["category", "is_active", "is_food_product"]

    def get_queryset(self):
        return Product.objects.select_related("category").order_by("-created_at", "-id")

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        if (
            product.batches.exists()
            or product.stock_transactions.exists()
            or product.order_items.exists()
        ):
            return Response(
                {
                    "detail": "Product has stock history and cannot be deleted. "
                    "Set is_active=false instead.",
                },
                status=status.HTTP_409_CONFLICT,
            )
        return super().destroy(request, *args, **kwargs)

    # -----------------------------
    # Alerts: Low stock
    # -----------------------------
    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="threshold",
                type=int,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Stock level at or below which a product is listed "
                "(defaults to INVENTORY_LOW_STOCK_THRESHOLD).",
            ),
        ],
        responses={
            200: OpenApiResponse(response=ProductSerializer(many=True)),
            400: OpenApiResponse(description="Invalid threshold"),
        },
    )
    @action(detail=False, methods=["get"], url_path="alerts/low-stock")
    def low_stock_alerts(self, request):
        """
        GET /products/products/alerts/low-stock/?threshold=50
        """
        try:
            threshold = query_int(
                request,
                "threshold",
                default=settings.INVENTORY_LOW_STOCK_THRESHOLD,
            )
            products = get_queries().low_stock(threshold)
        except ValueError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        data = self.get_serializer(products, many=True).data
        return Response({"count": len(data), "threshold": threshold, "results": data})
