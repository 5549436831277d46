# analytics/views.py
"""
Dashboard endpoints. Each view fetches a snapshot for the window and hands
it to the pure aggregators; fetch failures are reported here, never inside
the aggregators.
"""
import logging

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.dates import parse_date_range
from common.permissions import IsStaffMember
from orders.services import dashboard_window_start, fetch_line_items, fetch_orders
from .aggregation import aggregate_daily_revenue, aggregate_status_counts
from .stats import compute_stats

logger = logging.getLogger(__name__)


class BaseDashboardView(APIView):
    """
    Common window parsing and data-layer error handling for dashboard views.
    Without date_from/date_to the window is the last DASHBOARD_WINDOW_MONTHS.
    """
    permission_classes = [IsAuthenticated, IsStaffMember]

    def handle_exception(self, exc):
        if isinstance(exc, DatabaseError):
            logger.error(
                f"Error fetching dashboard data: {type(exc).__name__}: {exc}",
                exc_info=True,
                extra={
                    "user_id": getattr(self.request.user, "id", None),
                    "path": self.request.path,
                },
            )
            return Response(
                {"error": "Could not fetch orders. Please try again."},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return super().handle_exception(exc)

    def get_window(self, request):
        """
        Returns:
            Tuple of (date_from, date_to, error_response)
        """
        df, dt_, error_msg = parse_date_range(
            request.query_params.get("date_from"),
            request.query_params.get("date_to"),
        )
        if error_msg:
            return None, None, Response({"error": error_msg}, status=status.HTTP_400_BAD_REQUEST)
        if df is None:
            df = dashboard_window_start(dt_ or timezone.now())
        return df, dt_, None

    def window_payload(self, df, dt_):
        return {
            "date_from": df.isoformat(),
            "date_to": dt_.isoformat() if dt_ else None,
        }


class DashboardSummaryView(BaseDashboardView):
    """
    GET /api/v1/analytics/dashboard/summary
    Total sales, new orders, average order value and top item sold.
    """

    def get(self, request):
        df, dt_, error = self.get_window(request)
        if error:
            return error

        stats = compute_stats(fetch_orders(df, dt_), fetch_line_items(df, dt_))
        return Response({
            **stats.as_dict(),
            "currency": getattr(settings, "CONSOLE_CURRENCY", "PHP"),
            "window": self.window_payload(df, dt_),
        })


class DailyRevenueView(BaseDashboardView):
    """
    GET /api/v1/analytics/dashboard/daily-revenue
    One point per UTC day with orders, ascending.
    """

    def get(self, request):
        df, dt_, error = self.get_window(request)
        if error:
            return error

        points = aggregate_daily_revenue(fetch_orders(df, dt_))
        return Response({
            "results": [p.as_dict() for p in points],
            "window": self.window_payload(df, dt_),
        })


class DeliveryStatusView(BaseDashboardView):
    """
    GET /api/v1/analytics/dashboard/delivery-status
    Order counts per delivery status ("Unknown" for unset).
    """

    def get(self, request):
        df, dt_, error = self.get_window(request)
        if error:
            return error

        counts = aggregate_status_counts(fetch_orders(df, dt_))
        return Response({
            "results": [c.as_dict() for c in counts],
            "window": self.window_payload(df, dt_),
        })
