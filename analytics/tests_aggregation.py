"""
Tests for the dashboard chart aggregators: revenue per UTC day and order
counts per delivery status.
"""
from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase

from analytics.aggregation import (
    UNKNOWN_DATE_LABEL,
    UNKNOWN_STATUS,
    DailyRevenuePoint,
    aggregate_daily_revenue,
    aggregate_status_counts,
)
from analytics.records import to_amount, to_quantity, to_utc_day
from orders.models import Order
from orders.services import fetch_orders


class DailyRevenueTests(SimpleTestCase):
    def test_empty_input_returns_empty_list(self):
        self.assertEqual(aggregate_daily_revenue([]), [])

    def test_groups_by_utc_day_in_ascending_order(self):
        orders = [
            {"created_at": "2024-01-01T10:00Z", "total_amount": 100},
            {"created_at": "2024-01-01T22:00Z", "total_amount": 50},
            {"created_at": "2024-01-02T00:00Z", "total_amount": 25},
        ]
        points = aggregate_daily_revenue(orders)

        self.assertEqual([p.date for p in points], ["2024-01-01", "2024-01-02"])
        self.assertEqual([p.total_revenue for p in points], [Decimal("150.00"), Decimal("25.00")])

    def test_offset_timestamps_are_converted_to_utc_day(self):
        # 23:30 in Manila is 15:30 UTC the same day; 07:30 in Manila is the previous UTC day
        orders = [
            {"created_at": "2024-03-10T23:30:00+08:00", "total_amount": "10"},
            {"created_at": "2024-03-10T07:30:00+08:00", "total_amount": "5"},
        ]
        points = aggregate_daily_revenue(orders)

        self.assertEqual([p.date for p in points], ["2024-03-09", "2024-03-10"])
        self.assertEqual([p.total_revenue for p in points], [Decimal("5.00"), Decimal("10.00")])

    def test_year_boundary_sorts_by_date_not_label(self):
        orders = [
            {"created_at": "2024-01-02T12:00Z", "total_amount": 1},
            {"created_at": "2023-12-31T12:00Z", "total_amount": 2},
            {"created_at": "2023-01-02T12:00Z", "total_amount": 4},
        ]
        points = aggregate_daily_revenue(orders)

        self.assertEqual([p.date for p in points], ["2023-01-02", "2023-12-31", "2024-01-02"])
        # same label in different years stays two separate points
        self.assertEqual(points[0].label, points[2].label)

    def test_malformed_amounts_count_as_zero(self):
        orders = [
            {"created_at": "2024-05-01T08:00Z", "total_amount": None},
            {"created_at": "2024-05-01T09:00Z", "total_amount": "abc"},
            {"created_at": "2024-05-01T10:00Z"},
            {"created_at": "2024-05-01T11:00Z", "total_amount": "12.5"},
        ]
        points = aggregate_daily_revenue(orders)

        self.assertEqual(len(points), 1)
        self.assertEqual(points[0].total_revenue, Decimal("12.50"))

    def test_undated_orders_keep_their_revenue(self):
        orders = [
            {"created_at": None, "total_amount": 10},
            {"created_at": "not a date", "total_amount": 10},
            {"created_at": "2024-05-01T10:00Z", "total_amount": 3},
        ]
        points = aggregate_daily_revenue(orders)

        self.assertEqual([p.date for p in points], ["2024-05-01", None])
        self.assertEqual(points[-1].label, UNKNOWN_DATE_LABEL)
        self.assertEqual(points[-1].total_revenue, Decimal("20.00"))
        self.assertEqual(sum((p.total_revenue for p in points), Decimal("0")), Decimal("23"))

    def test_out_of_range_amounts_count_as_zero(self):
        orders = [
            {"created_at": "2024-01-01T10:00Z", "total_amount": "1e30"},
            {"created_at": "2024-01-01T11:00Z", "total_amount": 10 ** 27},
            {"created_at": "2024-01-01T12:00Z", "total_amount": "4.20"},
        ]
        points = aggregate_daily_revenue(orders)

        self.assertEqual([(p.date, p.total_revenue) for p in points], [("2024-01-01", Decimal("4.20"))])

    def test_timestamp_that_overflows_utc_is_undated(self):
        orders = [
            {"created_at": "0001-01-01T00:00+01:00", "total_amount": 5},
            {"created_at": "2024-01-01T10:00Z", "total_amount": 1},
        ]
        points = aggregate_daily_revenue(orders)

        self.assertEqual([p.date for p in points], ["2024-01-01", None])
        self.assertEqual(points[-1].total_revenue, Decimal("5.00"))

    def test_sum_matches_total_of_orders(self):
        orders = [
            {"created_at": datetime(2024, 2, d, 12, tzinfo=dt_timezone.utc), "total_amount": Decimal("19.99") * d}
            for d in range(1, 8)
        ]
        points = aggregate_daily_revenue(orders)

        expected = sum((to_amount(o["total_amount"]) for o in orders), Decimal("0"))
        self.assertEqual(sum((p.total_revenue for p in points), Decimal("0")), expected)

    def test_accepts_objects_as_well_as_mappings(self):
        orders = [
            SimpleNamespace(created_at=datetime(2024, 4, 1, 9, tzinfo=dt_timezone.utc), total_amount=Decimal("7.25")),
            {"created_at": "2024-04-01T18:00Z", "total_amount": 2.75},
        ]
        points = aggregate_daily_revenue(orders)

        self.assertEqual(len(points), 1)
        self.assertEqual(points[0].total_revenue, Decimal("10.00"))

    def test_repeated_calls_give_identical_results(self):
        orders = [{"created_at": "2024-01-01T10:00Z", "total_amount": 100}]
        self.assertEqual(aggregate_daily_revenue(orders), aggregate_daily_revenue(orders))

    def test_point_as_dict(self):
        point = DailyRevenuePoint(day=date(2024, 1, 5), total_revenue=Decimal("150.50"))
        self.assertEqual(
            point.as_dict(),
            {"date": "2024-01-05", "label": "Jan 05", "total_revenue": 150.5},
        )


class StatusCountTests(SimpleTestCase):
    def test_empty_input_returns_empty_list(self):
        self.assertEqual(aggregate_status_counts([]), [])

    def test_missing_status_is_unknown(self):
        orders = [
            {"delivery_status": None},
            {"delivery_status": ""},
            {},
            {"delivery_status": "Shipped"},
        ]
        counts = {c.status: c.count for c in aggregate_status_counts(orders)}

        self.assertEqual(counts, {UNKNOWN_STATUS: 3, "Shipped": 1})

    def test_counts_sum_to_number_of_orders(self):
        statuses = ["Processing", "Shipped", None, "Delivered", "Shipped", "Cancelled", None, "Shipped"]
        orders = [{"delivery_status": s} for s in statuses]
        counts = aggregate_status_counts(orders)

        self.assertEqual(sum(c.count for c in counts), len(orders))

    def test_keeps_first_occurrence_order(self):
        orders = [{"delivery_status": s} for s in ["Shipped", "Processing", "Shipped", None]]
        self.assertEqual(
            [c.as_dict() for c in aggregate_status_counts(orders)],
            [
                {"status": "Shipped", "count": 2},
                {"status": "Processing", "count": 1},
                {"status": UNKNOWN_STATUS, "count": 1},
            ],
        )

    def test_repeated_calls_give_identical_results(self):
        orders = [{"delivery_status": "Delivered"}, {"delivery_status": None}]
        self.assertEqual(aggregate_status_counts(orders), aggregate_status_counts(orders))


class RecordCoercionTests(SimpleTestCase):
    def test_to_amount(self):
        self.assertEqual(to_amount("19.90"), Decimal("19.90"))
        self.assertEqual(to_amount(5), Decimal("5"))
        self.assertEqual(to_amount(None), Decimal("0"))
        self.assertEqual(to_amount(True), Decimal("0"))
        self.assertEqual(to_amount("NaN"), Decimal("0"))
        self.assertEqual(to_amount({"amount": 1}), Decimal("0"))
        self.assertEqual(to_amount("1e30"), Decimal("0"))
        self.assertEqual(to_amount(-10 ** 20), Decimal("0"))

    def test_to_quantity(self):
        self.assertEqual(to_quantity(3), 3)
        self.assertEqual(to_quantity("4"), 4)
        self.assertEqual(to_quantity(-2), 0)
        self.assertEqual(to_quantity("x"), 0)
        self.assertEqual(to_quantity(None), 0)

    def test_to_utc_day(self):
        self.assertEqual(to_utc_day("2024-01-01T23:59:59-01:00"), date(2024, 1, 2))
        self.assertEqual(to_utc_day(datetime(2024, 1, 1, 23, 0)), date(2024, 1, 1))
        self.assertEqual(to_utc_day(date(2024, 6, 30)), date(2024, 6, 30))
        self.assertIsNone(to_utc_day(""))
        self.assertIsNone(to_utc_day(12345))
        self.assertIsNone(to_utc_day("0001-01-01T00:00+01:00"))


class AggregationWithModelRowsTests(TestCase):
    def test_aggregates_fetched_rows(self):
        base = datetime(2024, 7, 1, 12, tzinfo=dt_timezone.utc)
        Order.objects.create(customer_name="Ana", total_amount=Decimal("100.00"), created_at=base)
        Order.objects.create(customer_name="Ben", total_amount=None, created_at=base + timedelta(hours=3))
        Order.objects.create(customer_name="Cy", total_amount=Decimal("40.10"), delivery_status="Shipped",
                             created_at=base + timedelta(days=1))

        rows = fetch_orders()
        points = aggregate_daily_revenue(rows)
        counts = {c.status: c.count for c in aggregate_status_counts(rows)}

        self.assertEqual([(p.date, p.total_revenue) for p in points],
                         [("2024-07-01", Decimal("100.00")), ("2024-07-02", Decimal("40.10"))])
        self.assertEqual(counts, {"Shipped": 1, UNKNOWN_STATUS: 2})

    def test_accepts_model_instances(self):
        order = Order.objects.create(customer_name="Dee", total_amount=Decimal("9.99"))
        points = aggregate_daily_revenue(Order.objects.all())

        self.assertEqual(len(points), 1)
        self.assertEqual(points[0].day, to_utc_day(order.created_at))
