# common/dates.py
"""
Date range parsing shared by the order list, the CSV export and the dashboard.
"""
from datetime import datetime, time
from typing import Optional, Tuple

from dateutil.parser import parse as parse_datetime
from django.utils import timezone
from django.utils.dateparse import parse_date as django_parse_date


def to_aware_dt(val: Optional[str], end_of_day: bool) -> Optional[datetime]:
    """
    Parse ISO datetime or YYYY-MM-DD and make it timezone-aware.

    A bare date expands to the start or end of that day in the current
    timezone. Raises ValueError when the value cannot be parsed.
    """
    if not val:
        return None
    d = django_parse_date(val.strip()) if len(val.strip()) == 10 else None
    if d:
        naive = datetime.combine(d, time.max if end_of_day else time.min)
        return timezone.make_aware(naive, timezone.get_current_timezone())
    try:
        dt = parse_datetime(val)
    except OverflowError as exc:
        raise ValueError(str(exc)) from exc
    # If a datetime was provided but is naive, localize it; otherwise keep its tzinfo
    return timezone.make_aware(dt, timezone.get_current_timezone()) if timezone.is_naive(dt) else dt


def parse_date_range(
    date_from: Optional[str],
    date_to: Optional[str],
    max_days: int = 366,
    require_both: bool = False,
) -> Tuple[Optional[datetime], Optional[datetime], Optional[str]]:
    """
    Parse and validate date range parameters.

    Args:
        date_from: ISO datetime or YYYY-MM-DD (inclusive)
        date_to: ISO datetime or YYYY-MM-DD (inclusive, bare dates run to end of day)
        max_days: Maximum allowed span in days
        require_both: When True, one bound without the other is an error

    Returns:
        Tuple of (date_from_dt, date_to_dt, error_message)
        If error_message is not None, the dates are invalid
    """
    try:
        df = to_aware_dt(date_from, end_of_day=False)
    except ValueError:
        return None, None, "Invalid date_from"
    try:
        dt_ = to_aware_dt(date_to, end_of_day=True)
    except ValueError:
        return None, None, "Invalid date_to"

    if require_both and (df is None) != (dt_ is None):
        return None, None, "Both date_from and date_to must be provided together, or neither"

    if df and dt_:
        if df > dt_:
            return None, None, "date_from must be before or equal to date_to"
        if (dt_ - df).days > max_days:
            return None, None, f"Date range cannot exceed {max_days} days"

    return df, dt_, None
