from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from analytics.stats import NO_TOP_ITEM, DashboardStats, compute_stats, top_selling_item


class ComputeStatsTests(SimpleTestCase):
    def test_empty_snapshot(self):
        stats = compute_stats([], [])

        self.assertEqual(stats.total_sales, Decimal("0"))
        self.assertEqual(stats.new_orders, 0)
        self.assertEqual(stats.average_order_value, Decimal("0"))
        self.assertEqual(stats.top_item_sold, NO_TOP_ITEM)
        self.assertEqual(
            stats.as_dict(),
            {"total_sales": 0.0, "new_orders": 0, "average_order_value": 0.0, "top_item_sold": "N/A"},
        )

    def test_totals_and_average(self):
        orders = [{"total_amount": "100.00"}, {"total_amount": 50}, {"total_amount": Decimal("0.01")}]
        stats = compute_stats(orders, [])

        self.assertEqual(stats.total_sales, Decimal("150.01"))
        self.assertEqual(stats.new_orders, 3)
        self.assertEqual(stats.average_order_value, Decimal("50.00"))

    def test_average_rounds_half_up(self):
        stats = compute_stats([{"total_amount": "0.05"}, {"total_amount": "0.00"}], [])
        # 0.025 rounds to 0.03
        self.assertEqual(stats.average_order_value, Decimal("0.03"))

    def test_non_numeric_amounts_count_as_zero(self):
        orders = [{"total_amount": None}, {"total_amount": "oops"}, {}, {"total_amount": 30}]
        stats = compute_stats(orders, [])

        self.assertEqual(stats.total_sales, Decimal("30.00"))
        self.assertEqual(stats.new_orders, 4)
        self.assertEqual(stats.average_order_value, Decimal("7.50"))

    def test_out_of_range_amounts_count_as_zero(self):
        stats = compute_stats([{"total_amount": 10 ** 27}, {"total_amount": "1e30"}, {"total_amount": "8.00"}], [])

        self.assertEqual(stats.total_sales, Decimal("8.00"))
        self.assertEqual(stats.new_orders, 3)
        self.assertEqual(stats.average_order_value, Decimal("2.67"))

    def test_single_zero_value_order_matches_empty_average(self):
        self.assertEqual(
            compute_stats([{"total_amount": 0}], []).average_order_value,
            compute_stats([], []).average_order_value,
        )

    def test_repeated_calls_give_identical_results(self):
        orders = [{"total_amount": 10}]
        items = [{"product_name": "Tee", "quantity": 2}]
        self.assertEqual(compute_stats(orders, items), compute_stats(orders, items))

    def test_dataclass_average_uses_floor_of_one(self):
        stats = DashboardStats(total_sales=Decimal("12.34"), new_orders=0, top_item_sold=NO_TOP_ITEM)
        self.assertEqual(stats.average_order_value, Decimal("12.34"))


class TopSellingItemTests(SimpleTestCase):
    def test_sums_quantities_per_product(self):
        items = [
            {"product_name": "Hoodie", "quantity": 2},
            {"product_name": "Cap", "quantity": 3},
            {"product_name": "Hoodie", "quantity": 2},
        ]
        self.assertEqual(top_selling_item(items), "Hoodie")

    def test_first_name_wins_a_tie(self):
        items = [{"product_name": "A", "quantity": 5}, {"product_name": "B", "quantity": 5}]
        self.assertEqual(compute_stats([], items).top_item_sold, "A")

    def test_later_name_needs_strictly_more(self):
        items = [
            {"product_name": "B", "quantity": 1},
            {"product_name": "A", "quantity": 4},
            {"product_name": "B", "quantity": 3},
        ]
        self.assertEqual(top_selling_item(items), "B")

    def test_zero_quantities_give_no_top_item(self):
        items = [{"product_name": "A", "quantity": 0}, {"product_name": "B", "quantity": None}]
        self.assertEqual(top_selling_item(items), NO_TOP_ITEM)

    def test_unnamed_and_malformed_items_are_ignored(self):
        items = [
            {"product_name": None, "quantity": 99},
            {"product_name": "", "quantity": 99},
            {"quantity": 99},
            {"product_name": "Socks", "quantity": "two"},
            {"product_name": "Scarf", "quantity": -3},
            {"product_name": "Belt", "quantity": "1"},
        ]
        self.assertEqual(top_selling_item(items), "Belt")

    def test_accepts_objects(self):
        items = [SimpleNamespace(product_name="Jacket", quantity=1)]
        self.assertEqual(top_selling_item(items), "Jacket")

    def test_non_string_names_are_reported_as_text(self):
        items = [
            {"product_name": ["Tee", "Black"], "quantity": 1},
            {"product_name": 1042, "quantity": 3},
            {"product_name": "1042", "quantity": 1},
        ]
        top = compute_stats([], items).top_item_sold

        self.assertEqual(top, "1042")
        self.assertIsInstance(top, str)
