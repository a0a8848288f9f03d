# products/views/dashboard.py

"""
DASHBOARD STATS

PATH: products/views/dashboard.py

Endpoint:
- GET /api/dashboard/stats/?threshold=&days=

Contract:
- threshold defaults to INVENTORY_LOW_STOCK_THRESHOLD
- days defaults to INVENTORY_EXPIRY_WINDOW_DAYS
- recent_activity: the 5 newest stock transactions

Read-only; every figure comes from InventoryQueries plus the order count.
"""

from __future__ import annotations

from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.models import Order
from products.serializers import (
    ExpiringBatchSerializer,
    ProductSerializer,
    StockTransactionSerializer,
)
from products.services import get_queries
from products.views.errors import query_int

RECENT_ACTIVITY_LIMIT = 5


class DashboardStatsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter(name="threshold", type=int, location=OpenApiParameter.QUERY),
            OpenApiParameter(name="days", type=int, location=OpenApiParameter.QUERY),
        ],
        responses={
            200: OpenApiResponse(description="Inventory overview"),
            400: OpenApiResponse(description="Invalid threshold / days"),
        },
    )
    def get(self, request):
        try:
            threshold = query_int(
                request, "threshold", default=settings.INVENTORY_LOW_STOCK_THRESHOLD
            )
            days = query_int(request, "days", default=settings.INVENTORY_EXPIRY_WINDOW_DAYS)
            stats = get_queries().dashboard_stats(
                threshold=threshold,
                days_ahead=days,
                recent_limit=RECENT_ACTIVITY_LIMIT,
            )
        except ValueError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "total_products": stats.total_products,
                "low_stock_count": len(stats.low_stock),
                "low_stock_items": ProductSerializer(stats.low_stock, many=True).data,
                "expiring_count": len(stats.expiring),
                "expiring_batches": ExpiringBatchSerializer(stats.expiring, many=True).data,
                "total_orders": Order.objects.count(),
                "recent_activity": StockTransactionSerializer(
                    stats.recent_activity, many=True
                ).data,
            }
        )
