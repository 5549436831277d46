# analytics/stats.py
"""
Summary cards for the dashboard: total sales, new orders, average order
value and the top-selling item.

``compute_stats`` is a pure reducer over whatever snapshot it receives; the
caller decides the window (the dashboard uses the last month).
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable

from .records import ZERO, field_value, round_money, to_amount, to_quantity

NO_TOP_ITEM = "N/A"


@dataclass(frozen=True)
class DashboardStats:
    total_sales: Decimal
    new_orders: int
    top_item_sold: str

    @property
    def average_order_value(self) -> Decimal:
        # zero orders divide by 1, so the average equals total_sales
        return round_money(self.total_sales / (self.new_orders or 1))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_sales": float(self.total_sales),
            "new_orders": self.new_orders,
            "average_order_value": float(self.average_order_value),
            "top_item_sold": self.top_item_sold,
        }


def top_selling_item(line_items: Iterable[Any]) -> str:
    """
    Product name with the largest summed quantity.

    Names are scanned in first-appearance order and only a strictly larger
    total takes the lead, so the earliest name wins a tie.
    """
    sold: Dict[str, int] = {}
    for item in line_items:
        name = field_value(item, "product_name")
        if not name:
            continue
        name = str(name)
        sold[name] = sold.get(name, 0) + to_quantity(field_value(item, "quantity"))

    top_item, top_qty = NO_TOP_ITEM, 0
    for name, qty in sold.items():
        if qty > top_qty:
            top_item, top_qty = name, qty
    return top_item


def compute_stats(orders: Iterable[Any], line_items: Iterable[Any]) -> DashboardStats:
    total = ZERO
    count = 0
    for order in orders:
        total += to_amount(field_value(order, "total_amount"))
        count += 1

    return DashboardStats(
        total_sales=round_money(total),
        new_orders=count,
        top_item_sold=top_selling_item(line_items),
    )
