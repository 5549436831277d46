# orders/services.py
"""
Data access for orders: snapshots for the dashboard, list normalisation and
status updates with an audit trail.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from .models import (
    AuditLog,
    DELIVERY_STATUS_OPTIONS,
    Order,
    OrderItem,
    PAYMENT_STATUS_OPTIONS,
)

logger = logging.getLogger(__name__)

ORDER_FIELDS = (
    "id",
    "customer_name",
    "created_at",
    "payment_method",
    "payment_status",
    "delivery_status",
    "total_amount",
)

STATUS_ACTIONS = {
    "delivery_status": AuditLog.DELIVERY_STATUS_CHANGED,
    "payment_status": AuditLog.PAYMENT_STATUS_CHANGED,
}

STATUS_OPTIONS = {
    "delivery_status": DELIVERY_STATUS_OPTIONS,
    "payment_status": PAYMENT_STATUS_OPTIONS,
}


def dashboard_window_start(now: Optional[datetime] = None) -> datetime:
    """Start of the dashboard window: one calendar month back by default."""
    now = now or timezone.now()
    return now - relativedelta(months=getattr(settings, "DASHBOARD_WINDOW_MONTHS", 1))


def order_queryset(date_from: Optional[datetime] = None, date_to: Optional[datetime] = None):
    qs = Order.objects.all()
    if date_from:
        qs = qs.filter(created_at__gte=date_from)
    if date_to:
        qs = qs.filter(created_at__lte=date_to)
    return qs.order_by("-created_at", "-id")


def fetch_orders(date_from: Optional[datetime] = None, date_to: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Materialise order rows (newest first) for the aggregators."""
    return list(order_queryset(date_from, date_to).values(*ORDER_FIELDS))


def fetch_line_items(date_from: Optional[datetime] = None, date_to: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Line items whose order falls in the window, in insertion order.

    Line items only feed the "top item sold" card, so a failed fetch degrades
    to an empty list (the card shows N/A) instead of failing the dashboard.
    """
    qs = OrderItem.objects.all()
    if date_from:
        qs = qs.filter(order__created_at__gte=date_from)
    if date_to:
        qs = qs.filter(order__created_at__lte=date_to)
    try:
        return list(qs.order_by("id").values("order_id", "product_name", "quantity"))
    except DatabaseError:
        logger.warning("Could not fetch order items for top item sold, defaulting to N/A", exc_info=True)
        return []


def normalize_order(row: Dict[str, Any]) -> Dict[str, Any]:
    """Apply the order list defaults for rows that have no status yet."""
    out = dict(row)
    out["delivery_status"] = row.get("delivery_status") or DELIVERY_STATUS_OPTIONS[0]
    out["payment_status"] = row.get("payment_status") or PAYMENT_STATUS_OPTIONS[0]
    return out


@transaction.atomic
def update_order_status(
    order: Order,
    *,
    user=None,
    delivery_status: Optional[str] = None,
    payment_status: Optional[str] = None,
) -> Order:
    """
    Set delivery and/or payment status on an order.

    The row is locked for the duration of the update; each field that
    actually changes gets one AuditLog entry. Raises ValueError for a value
    outside the fixed status sets.
    """
    requested = {"delivery_status": delivery_status, "payment_status": payment_status}
    for field, value in requested.items():
        if value is not None and value not in STATUS_OPTIONS[field]:
            raise ValueError(f"Invalid {field}: {value}")

    locked = Order.objects.select_for_update().get(pk=order.pk)
    changes = {}
    for field, value in requested.items():
        if value is None:
            continue
        old = getattr(locked, field)
        if old == value:
            continue
        setattr(locked, field, value)
        changes[field] = (old, value)

    if not changes:
        return locked

    locked.save(update_fields=[*changes.keys(), "updated_at"])
    for field, (old, new) in changes.items():
        AuditLog.record(
            order=locked,
            action=STATUS_ACTIONS[field],
            user=user,
            metadata={"field": field, "old": old, "new": new},
        )
        logger.info(
            "Order %s %s changed from %s to %s by user %s",
            locked.pk, field, old, new, getattr(user, "pk", None),
        )
    return locked
