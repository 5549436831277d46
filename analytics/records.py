# analytics/records.py
"""
Field access and coercion helpers for order snapshots.

Rows reach the aggregators in several shapes: model instances, ``.values()``
dicts, or JSON payloads. These helpers read a field from any of them and
normalise it to a safe value instead of raising, so one bad record can never
block a dashboard render.
"""
from collections.abc import Mapping
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from dateutil.parser import parse as parse_datetime

ZERO = Decimal("0")
CENTS = Decimal("0.01")
# amounts at or above this are treated as malformed
MAX_AMOUNT = Decimal("1e15")


def field_value(row: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping or an object, falling back to ``default``."""
    if isinstance(row, Mapping):
        return row.get(name, default)
    return getattr(row, name, default)


def to_amount(value: Any) -> Decimal:
    """Coerce a monetary value to Decimal; missing, non-numeric or out-of-range becomes 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
        return ZERO
    return amount


def to_quantity(value: Any) -> int:
    """Coerce a quantity to a non-negative int; anything malformed becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    qty = to_amount(value)
    return max(int(qty), 0)


def round_money(value: Decimal) -> Decimal:
    # half away from zero, the way receipts are rounded
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_utc_day(value: Any) -> Optional[date]:
    """
    Calendar day of a timestamp at the UTC midnight boundary.

    Accepts aware/naive datetimes, dates and ISO strings. Naive values are
    read as UTC. Returns None when no day can be determined.
    """
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = parse_datetime(text)
        except (ValueError, OverflowError):
            return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        try:
            return value.astimezone(dt_timezone.utc).date()
        except (OverflowError, ValueError):
            return None
    if isinstance(value, date):
        return value
    return None
