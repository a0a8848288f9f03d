"""
======================================================
PATH: orders/views.py
======================================================
ORDER VIEWSET

Endpoints:
- GET  /api/orders/?status=
- POST /api/orders/                  place (pending or completed)
- GET  /api/orders/{id}/
- POST /api/orders/{id}/process/     pending -> completed
- POST /api/orders/{id}/cancel/      pending -> cancelled

All stock effects are delegated to orders.services.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from orders.models import Order
from orders.serializers import OrderCreateSerializer, OrderSerializer
from orders.services import cancel_order, place_order, process_order
from products.services.exceptions import StockLedgerError
from products.views.errors import stock_error_response


class OrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status"]

    def get_queryset(self):
        return (
            Order.objects.select_related("created_by")
            .prefetch_related("items__product", "stock_transactions")
            .order_by("-order_date", "-id")
        )

    def _user_id(self, request):
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            return user.pk
        return None

    def _detail(self, order, http_status=status.HTTP_200_OK):
        order = self.get_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=http_status)

    @extend_schema(
        request=OrderCreateSerializer,
        responses={
            201: OrderSerializer,
            400: OpenApiResponse(description="No items / invalid quantity"),
            404: OpenApiResponse(description="Product not found"),
            409: OpenApiResponse(description="Insufficient stock"),
        },
    )
    def create(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        try:
            order = place_order(
                items=[dict(line) for line in v["items"]],
                status=v.get("status"),
                customer_name=v.get("customer_name"),
                customer_contact=v.get("customer_contact"),
                notes=v.get("notes"),
                user_id=self._user_id(request),
            )
        except StockLedgerError as exc:
            return stock_error_response(exc)

        return self._detail(order, status.HTTP_201_CREATED)

    @extend_schema(
        request=None,
        responses={
            200: OrderSerializer,
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Order not pending / insufficient stock"),
        },
    )
    @action(detail=True, methods=["post"], url_path="process")
    def process(self, request, pk=None):
        try:
            order = process_order(pk, user_id=self._user_id(request))
        except StockLedgerError as exc:
            return stock_error_response(exc)
        return self._detail(order)

    @extend_schema(
        request=None,
        responses={
            200: OrderSerializer,
            404: OpenApiResponse(description="Order not found"),
            409: OpenApiResponse(description="Order not pending"),
        },
    )
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        try:
            order = cancel_order(pk)
        except StockLedgerError as exc:
            return stock_error_response(exc)
        return self._detail(order)
