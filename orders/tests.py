"""
Orders tests: list defaults and filters, status updates with audit trail,
history and CSV export.
"""
import csv
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIRequestFactory, force_authenticate

from common.roles import StaffRole
from orders.models import AuditLog, DELIVERY_STATUS_OPTIONS, Order, OrderItem, PAYMENT_STATUS_OPTIONS
from orders.services import dashboard_window_start, normalize_order, update_order_status
from orders.views import (
    OrderDetailView,
    OrderExportView,
    OrderHistoryView,
    OrderListView,
    OrderStatusOptionsView,
)
from staff.models import StaffProfile


User = get_user_model()


class OrderServiceTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="ops@wear.test", email="ops@wear.test", password="secret123")
        self.order = Order.objects.create(customer_name="Ana", payment_method="GCash", total_amount=Decimal("250.00"))

    def test_normalize_order_defaults(self):
        row = normalize_order({"id": 1, "delivery_status": None, "payment_status": ""})
        self.assertEqual(row["delivery_status"], "Processing")
        self.assertEqual(row["payment_status"], "Pending")

        row = normalize_order({"id": 2, "delivery_status": "Shipped", "payment_status": "Paid"})
        self.assertEqual(row["delivery_status"], "Shipped")
        self.assertEqual(row["payment_status"], "Paid")

    def test_status_option_lists(self):
        self.assertEqual(DELIVERY_STATUS_OPTIONS, ["Processing", "Shipped", "Delivered", "Cancelled"])
        self.assertEqual(PAYMENT_STATUS_OPTIONS, ["Pending", "Paid", "Failed", "Refunded"])

    def test_update_records_one_audit_entry_per_changed_field(self):
        update_order_status(self.order, user=self.user, delivery_status="Shipped", payment_status="Paid")

        self.order.refresh_from_db()
        self.assertEqual(self.order.delivery_status, "Shipped")
        self.assertEqual(self.order.payment_status, "Paid")

        logs = AuditLog.objects.filter(order=self.order).order_by("id")
        self.assertEqual(
            [log.action for log in logs],
            [AuditLog.DELIVERY_STATUS_CHANGED, AuditLog.PAYMENT_STATUS_CHANGED],
        )
        self.assertEqual(logs[0].metadata, {"field": "delivery_status", "old": None, "new": "Shipped"})
        self.assertEqual(logs[0].user, self.user)

    def test_unchanged_value_is_not_audited(self):
        self.order.delivery_status = "Delivered"
        self.order.save()

        update_order_status(self.order, delivery_status="Delivered")

        self.assertFalse(AuditLog.objects.filter(order=self.order).exists())

    def test_invalid_status_raises(self):
        with self.assertRaises(ValueError):
            update_order_status(self.order, delivery_status="Lost")
        self.order.refresh_from_db()
        self.assertIsNone(self.order.delivery_status)

    def test_dashboard_window_is_one_month(self):
        now = datetime(2024, 3, 31, 12, tzinfo=dt_timezone.utc)
        self.assertEqual(dashboard_window_start(now), datetime(2024, 2, 29, 12, tzinfo=dt_timezone.utc))


class OrderApiTestBase(TestCase):
    def setUp(self):
        self.factory = APIRequestFactory()
        self.user = User.objects.create_user(username="staff@wear.test", email="staff@wear.test", password="secret123")
        StaffProfile.objects.create(user=self.user, full_name="Sam Staff", role=StaffRole.STAFF)

        now = timezone.now()
        self.o1 = Order.objects.create(
            customer_name="Ana Cruz", payment_method="GCash", total_amount=Decimal("100.00"),
            created_at=now - timedelta(days=3),
        )
        self.o2 = Order.objects.create(
            customer_name="Ben Reyes", payment_method="COD", total_amount=Decimal("50.00"),
            delivery_status="Shipped", payment_status="Paid",
            created_at=now - timedelta(days=1),
        )
        OrderItem.objects.create(order=self.o1, product_name="Hoodie", quantity=1)

    def _request(self, method, view, data=None, user=None, **kwargs):
        if method == "patch":
            request = self.factory.patch("/api/v1/orders/", data or {}, format="json")
        else:
            request = self.factory.get("/api/v1/orders/", data or {})
        force_authenticate(request, user=user or self.user)
        return view.as_view()(request, **kwargs)


class OrderListViewTests(OrderApiTestBase):
    def test_newest_first_with_display_defaults(self):
        response = self._request("get", OrderListView)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)
        results = response.data["results"]
        self.assertEqual([r["id"] for r in results], [self.o2.id, self.o1.id])
        self.assertEqual(results[1]["delivery_status"], "Processing")
        self.assertEqual(results[1]["payment_status"], "Pending")

    def test_default_status_filter_matches_unset_rows(self):
        response = self._request("get", OrderListView, {"delivery_status": "Processing"})

        self.assertEqual([r["id"] for r in response.data["results"]], [self.o1.id])

    def test_query_filter(self):
        response = self._request("get", OrderListView, {"query": "reyes"})
        self.assertEqual([r["id"] for r in response.data["results"]], [self.o2.id])

        response = self._request("get", OrderListView, {"query": str(self.o1.id)})
        self.assertIn(self.o1.id, [r["id"] for r in response.data["results"]])

    def test_paging(self):
        response = self._request("get", OrderListView, {"page": 2, "page_size": 1})

        self.assertEqual(response.data["count"], 2)
        self.assertEqual([r["id"] for r in response.data["results"]], [self.o1.id])

    def test_bad_paging_params(self):
        response = self._request("get", OrderListView, {"page": "x"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_date(self):
        response = self._request("get", OrderListView, {"date_from": "yesterday-ish"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Invalid date_from")

    def test_status_options(self):
        response = self._request("get", OrderStatusOptionsView)

        self.assertEqual(response.data["delivery_status"], DELIVERY_STATUS_OPTIONS)
        self.assertEqual(response.data["payment_status"], PAYMENT_STATUS_OPTIONS)

    def test_non_staff_forbidden(self):
        outsider = User.objects.create_user(username="outsider", password="secret123")
        response = self._request("get", OrderListView, user=outsider)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_superuser_without_profile_allowed(self):
        root = User.objects.create_superuser(username="root", email="root@wear.test", password="secret123")
        response = self._request("get", OrderListView, user=root)

        self.assertEqual(response.status_code, status.HTTP_200_OK)


class OrderDetailViewTests(OrderApiTestBase):
    def test_get_includes_items(self):
        response = self._request("get", OrderDetailView, pk=self.o1.pk)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["items"][0]["product_name"], "Hoodie")
        self.assertEqual(response.data["delivery_status"], "Processing")

    def test_patch_updates_status_and_history(self):
        response = self._request("patch", OrderDetailView, {"delivery_status": "Delivered"}, pk=self.o2.pk)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["delivery_status"], "Delivered")
        self.assertEqual(response.data["payment_status"], "Paid")

        history = self._request("get", OrderHistoryView, pk=self.o2.pk)
        self.assertEqual(len(history.data), 1)
        self.assertEqual(history.data[0]["action"], AuditLog.DELIVERY_STATUS_CHANGED)
        self.assertEqual(history.data[0]["user_name"], "Sam Staff")

    def test_patch_rejects_unknown_status(self):
        response = self._request("patch", OrderDetailView, {"payment_status": "Maybe"}, pk=self.o2.pk)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.o2.refresh_from_db()
        self.assertEqual(self.o2.payment_status, "Paid")

    def test_patch_requires_a_field(self):
        response = self._request("patch", OrderDetailView, {}, pk=self.o2.pk)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_order(self):
        response = self._request("get", OrderDetailView, pk=999999)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class OrderExportViewTests(OrderApiTestBase):
    def test_export_csv(self):
        response = self._request("get", OrderExportView)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response["Content-Type"].startswith("text/csv"))
        self.assertIn("attachment; filename=\"orders_export_", response["Content-Disposition"])

        rows = list(csv.DictReader(StringIO(response.content.decode("utf-8"))))
        self.assertEqual([int(r["id"]) for r in rows], [self.o2.id, self.o1.id])
        self.assertEqual(rows[1]["delivery_status"], "Processing")
        self.assertEqual(rows[1]["total_amount"], "100.00")

    def test_export_respects_filters(self):
        response = self._request("get", OrderExportView, {"payment_status": "Paid"})

        rows = list(csv.DictReader(StringIO(response.content.decode("utf-8"))))
        self.assertEqual([int(r["id"]) for r in rows], [self.o2.id])

    def test_empty_export(self):
        response = self._request("get", OrderExportView, {"query": "nobody"})
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
