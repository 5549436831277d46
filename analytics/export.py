# analytics/export.py
"""
CSV export of order rows for the order management screen.
"""
import csv
from datetime import datetime
from decimal import Decimal
from io import StringIO
from typing import Any, Dict, List, Optional

ORDER_EXPORT_FIELDS = [
    "id",
    "customer_name",
    "created_at",
    "payment_method",
    "payment_status",
    "delivery_status",
    "total_amount",
]


def _csv_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def export_to_csv(rows: List[Dict[str, Any]], fieldnames: Optional[List[str]] = None) -> str:
    """
    Export a list of dictionaries to CSV.

    Header comes from ``fieldnames`` or the first row's keys. ``None`` is
    written as an empty cell; the csv module quotes values containing
    commas, quotes or newlines and doubles embedded quotes.
    Returns "" for no rows.
    """
    if not rows:
        return ""

    output = StringIO()
    if fieldnames is None:
        fieldnames = list(rows[0].keys())

    writer = csv.DictWriter(output, fieldnames=fieldnames, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({key: _csv_value(row.get(key)) for key in fieldnames})

    return output.getvalue()


def orders_to_csv(rows: List[Dict[str, Any]]) -> str:
    return export_to_csv(rows, fieldnames=ORDER_EXPORT_FIELDS)
