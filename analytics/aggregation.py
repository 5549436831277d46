# analytics/aggregation.py
"""
Chart data for the dashboard: revenue per day and orders per delivery status.

Both functions are pure. They read only the rows they are handed and return
new lists, so callers simply re-invoke them on every fresh snapshot.
"""
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from .records import ZERO, field_value, round_money, to_amount, to_utc_day

logger = logging.getLogger(__name__)

UNKNOWN_STATUS = "Unknown"
UNKNOWN_DATE_LABEL = "Unknown date"


@dataclass(frozen=True)
class DailyRevenuePoint:
    # None for the bucket of orders without a usable created_at
    day: Optional[date]
    total_revenue: Decimal

    @property
    def date(self) -> Optional[str]:
        return self.day.isoformat() if self.day else None

    @property
    def label(self) -> str:
        # display only; ordering always uses ``day``
        if self.day is None:
            return UNKNOWN_DATE_LABEL
        return self.day.strftime("%b %d")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "label": self.label,
            "total_revenue": float(self.total_revenue),
        }


@dataclass(frozen=True)
class StatusCount:
    status: str
    count: int

    def as_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "count": self.count}


def aggregate_daily_revenue(orders: Iterable[Any]) -> List[DailyRevenuePoint]:
    """
    Sum ``total_amount`` per UTC calendar day of ``created_at``.

    Returns one point per distinct day, ascending by date, with totals
    rounded to cents. Orders without a usable ``created_at`` are summed into
    a single trailing point with ``day=None`` so no revenue is lost.
    """
    totals: Dict[date, Decimal] = {}
    undated: Optional[Decimal] = None
    for order in orders:
        amount = to_amount(field_value(order, "total_amount"))
        day = to_utc_day(field_value(order, "created_at"))
        if day is None:
            logger.debug("Order %s has no usable created_at", field_value(order, "id"))
            undated = (undated or ZERO) + amount
            continue
        totals[day] = totals.get(day, ZERO) + amount

    points = [
        DailyRevenuePoint(day=day, total_revenue=round_money(totals[day]))
        for day in sorted(totals)
    ]
    if undated is not None:
        points.append(DailyRevenuePoint(day=None, total_revenue=round_money(undated)))
    return points


def aggregate_status_counts(orders: Iterable[Any]) -> List[StatusCount]:
    """
    Count orders per ``delivery_status``.

    Missing statuses are counted as "Unknown" here, unlike the order list
    which shows them as "Processing". Entries keep first-occurrence order.
    """
    counts = Counter(
        str(field_value(order, "delivery_status") or UNKNOWN_STATUS)
        for order in orders
    )
    return [StatusCount(status=status, count=count) for status, count in counts.items()]
