# orders/views.py
import logging

from django.db.models import Q
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from analytics.export import orders_to_csv
from common.dates import parse_date_range
from common.permissions import IsStaffMember
from .models import AuditLog, DELIVERY_STATUS_OPTIONS, Order, PAYMENT_STATUS_OPTIONS
from .serializers import (
    AuditLogSerializer,
    OrderDetailSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
)
from .services import ORDER_FIELDS, normalize_order, order_queryset, update_order_status

logger = logging.getLogger(__name__)


class OrderFilterMixin:
    """
    Shared query-string filtering for the order list and CSV export:
    ?date_from&date_to&delivery_status&payment_status&query
    """

    def filter_orders(self, request):
        params = request.query_params
        df, dt_, error_msg = parse_date_range(params.get("date_from"), params.get("date_to"))
        if error_msg:
            return None, Response({"error": error_msg}, status=status.HTTP_400_BAD_REQUEST)

        qs = order_queryset(df, dt_)

        delivery = (params.get("delivery_status") or "").strip()
        payment = (params.get("payment_status") or "").strip()
        query = (params.get("query") or "").strip()

        # unset statuses are listed as the defaults, so filter them the same way
        if delivery:
            cond = Q(delivery_status__iexact=delivery)
            if delivery.lower() == DELIVERY_STATUS_OPTIONS[0].lower():
                cond |= Q(delivery_status__isnull=True) | Q(delivery_status="")
            qs = qs.filter(cond)
        if payment:
            cond = Q(payment_status__iexact=payment)
            if payment.lower() == PAYMENT_STATUS_OPTIONS[0].lower():
                cond |= Q(payment_status__isnull=True) | Q(payment_status="")
            qs = qs.filter(cond)
        if query:
            cond = Q(customer_name__icontains=query) | Q(payment_method__icontains=query)
            if query.isdigit():
                cond |= Q(id=int(query))
            qs = qs.filter(cond)
        return qs, None


class OrderListView(OrderFilterMixin, generics.ListAPIView):
    """
    GET /api/v1/orders/?page=1&page_size=50
    Orders newest first, statuses defaulted for display.
    """
    permission_classes = [IsAuthenticated, IsStaffMember]
    serializer_class = OrderSerializer
    pagination_class = None

    def list(self, request, *args, **kwargs):
        qs, error = self.filter_orders(request)
        if error:
            return error
        try:
            page_size = max(int(request.query_params.get("page_size") or 50), 1)
            page = max(int(request.query_params.get("page") or 1), 1)
        except (TypeError, ValueError):
            return Response({"error": "page and page_size must be integers"}, status=status.HTTP_400_BAD_REQUEST)

        total = qs.count()
        start = (page - 1) * page_size
        rows = qs[start:start + page_size]
        ser = self.get_serializer(rows, many=True)
        return Response({"count": total, "results": ser.data})


class OrderStatusOptionsView(APIView):
    permission_classes = [IsAuthenticated, IsStaffMember]

    def get(self, request):
        return Response({
            "delivery_status": DELIVERY_STATUS_OPTIONS,
            "payment_status": PAYMENT_STATUS_OPTIONS,
        })


class OrderDetailView(APIView):
    """
    GET   /api/v1/orders/<pk>
    PATCH /api/v1/orders/<pk>  {"delivery_status": "Shipped", "payment_status": "Paid"}
    """
    permission_classes = [IsAuthenticated, IsStaffMember]

    def get(self, request, pk):
        order = get_object_or_404(Order.objects.prefetch_related("items"), pk=pk)
        return Response(OrderDetailSerializer(order).data)

    def patch(self, request, pk):
        order = get_object_or_404(Order, pk=pk)
        ser = OrderStatusUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        order = update_order_status(order, user=request.user, **ser.validated_data)
        order = Order.objects.prefetch_related("items").get(pk=order.pk)
        return Response(OrderDetailSerializer(order).data)


class OrderHistoryView(generics.ListAPIView):
    permission_classes = [IsAuthenticated, IsStaffMember]
    serializer_class = AuditLogSerializer
    pagination_class = None

    def get_queryset(self):
        order = get_object_or_404(Order, pk=self.kwargs["pk"])
        return AuditLog.objects.filter(order=order).select_related("user").order_by("-created_at", "-id")


class OrderExportView(OrderFilterMixin, APIView):
    """
    GET /api/v1/orders/export
    CSV download of the filtered orders; 204 when there is nothing to export.
    """
    permission_classes = [IsAuthenticated, IsStaffMember]

    def get(self, request, *args, **kwargs):
        qs, error = self.filter_orders(request)
        if error:
            return error

        rows = [normalize_order(row) for row in qs.values(*ORDER_FIELDS)]
        if not rows:
            return Response(status=status.HTTP_204_NO_CONTENT)

        filename = f"orders_export_{timezone.now().date().isoformat()}.csv"
        response = HttpResponse(orders_to_csv(rows), content_type="text/csv; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        logger.info("Exported %d orders for user %s", len(rows), request.user.pk)
        return response
