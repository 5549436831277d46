import csv
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from io import StringIO

from django.test import SimpleTestCase

from analytics.export import ORDER_EXPORT_FIELDS, export_to_csv, orders_to_csv


class ExportToCsvTests(SimpleTestCase):
    def test_empty_rows(self):
        self.assertEqual(export_to_csv([]), "")
        self.assertEqual(orders_to_csv([]), "")

    def test_header_from_first_row(self):
        out = export_to_csv([{"a": 1, "b": 2}, {"a": 3, "b": 4}])
        self.assertEqual(out, "a,b\n1,2\n3,4\n")

    def test_values_are_formatted_and_quoted(self):
        rows = [{
            "id": 7,
            "customer_name": 'Reyes, "Jun"',
            "created_at": datetime(2024, 1, 2, 3, 4, 5, tzinfo=dt_timezone.utc),
            "payment_method": None,
            "payment_status": "Paid",
            "delivery_status": "Shipped",
            "total_amount": Decimal("1299.50"),
        }]
        parsed = list(csv.DictReader(StringIO(orders_to_csv(rows))))

        self.assertEqual(len(parsed), 1)
        self.assertEqual(list(parsed[0].keys()), ORDER_EXPORT_FIELDS)
        self.assertEqual(parsed[0]["customer_name"], 'Reyes, "Jun"')
        self.assertEqual(parsed[0]["created_at"], "2024-01-02T03:04:05+00:00")
        self.assertEqual(parsed[0]["payment_method"], "")
        self.assertEqual(parsed[0]["total_amount"], "1299.50")

    def test_extra_keys_are_ignored(self):
        out = export_to_csv([{"a": 1, "secret": "x"}], fieldnames=["a"])
        self.assertEqual(out, "a\n1\n")
