"""
API tests for the dashboard endpoints.
"""
from datetime import timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIRequestFactory, force_authenticate

from analytics.views import DailyRevenueView, DashboardSummaryView, DeliveryStatusView
from common.roles import StaffRole
from orders.models import Order, OrderItem
from staff.models import StaffProfile

User = get_user_model()


class DashboardViewTestBase(TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.user = User.objects.create_user(
            username="staff@wear.test",
            email="staff@wear.test",
            password="secret123",
        )
        StaffProfile.objects.create(user=self.user, full_name="Sam Staff", role=StaffRole.STAFF)

        now = timezone.now()
        self.recent = Order.objects.create(
            customer_name="Ana",
            total_amount=Decimal("100.00"),
            delivery_status="Shipped",
            created_at=now - timedelta(days=2),
        )
        self.recent_2 = Order.objects.create(
            customer_name="Ben",
            total_amount=Decimal("50.00"),
            created_at=now - timedelta(days=1),
        )
        # outside the default one-month window
        self.old = Order.objects.create(
            customer_name="Old",
            total_amount=Decimal("999.00"),
            delivery_status="Delivered",
            created_at=now - timedelta(days=70),
        )
        OrderItem.objects.create(order=self.recent, product_name="Hoodie", quantity=2)
        OrderItem.objects.create(order=self.recent_2, product_name="Cap", quantity=2)
        OrderItem.objects.create(order=self.old, product_name="Scarf", quantity=50)

    def _get(self, view_cls, params=None, user=None):
        request = self.factory.get("/api/v1/analytics/dashboard/", params or {})
        force_authenticate(request, user=user or self.user)
        return view_cls.as_view()(request)


class DashboardSummaryViewTests(DashboardViewTestBase):
    def test_summary_uses_last_month(self):
        response = self._get(DashboardSummaryView)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_sales"], 150.0)
        self.assertEqual(response.data["new_orders"], 2)
        self.assertEqual(response.data["average_order_value"], 75.0)
        self.assertEqual(response.data["top_item_sold"], "Hoodie")
        self.assertEqual(response.data["currency"], "PHP")
        self.assertIsNone(response.data["window"]["date_to"])

    def test_explicit_window(self):
        day = (timezone.now() - timedelta(days=70)).date().isoformat()
        response = self._get(DashboardSummaryView, {"date_from": day, "date_to": day})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["new_orders"], 1)
        self.assertEqual(response.data["top_item_sold"], "Scarf")

    def test_invalid_window(self):
        response = self._get(DashboardSummaryView, {"date_from": "2024-02-10", "date_to": "2024-02-01"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "date_from must be before or equal to date_to")

    def test_database_error_returns_503(self):
        with mock.patch("analytics.views.fetch_orders", side_effect=DatabaseError("down")):
            response = self._get(DashboardSummaryView)

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data["error"], "Could not fetch orders. Please try again.")

    def test_line_item_failure_degrades_to_no_top_item(self):
        with mock.patch("orders.services.OrderItem") as item_model:
            item_model.objects.all.return_value.filter.return_value.order_by.side_effect = DatabaseError("down")
            response = self._get(DashboardSummaryView)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["new_orders"], 2)
        self.assertEqual(response.data["top_item_sold"], "N/A")

    def test_requires_console_account(self):
        outsider = User.objects.create_user(username="outsider", email="o@example.com", password="secret123")
        response = self._get(DashboardSummaryView, user=outsider)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_deactivated_staff_is_rejected(self):
        self.user.staff_profile.is_active = False
        self.user.staff_profile.save()
        response = self._get(DashboardSummaryView)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class DashboardChartViewTests(DashboardViewTestBase):
    def test_daily_revenue(self):
        response = self._get(DailyRevenueView)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.data["results"]
        self.assertEqual([r["total_revenue"] for r in results], [100.0, 50.0])
        self.assertEqual(results[0]["date"], self.recent.created_at.astimezone(dt_timezone.utc).date().isoformat())
        self.assertLess(results[0]["date"], results[1]["date"])

    def test_delivery_status(self):
        response = self._get(DeliveryStatusView)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        counts = {r["status"]: r["count"] for r in response.data["results"]}
        self.assertEqual(counts, {"Shipped": 1, "Unknown": 1})

    def test_empty_window(self):
        response = self._get(DailyRevenueView, {"date_from": "2001-01-01", "date_to": "2001-01-31"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["results"], [])
