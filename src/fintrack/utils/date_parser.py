"""Date parsing utilities."""

import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ].*)?$")
_SLASH_RE = re.compile(r"^(\d{1,4})[/.](\d{1,2})[/.](\d{1,4})$")
_COMPACT_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})")

# Excel stores dates as days since 1899-12-30 (accounting for the 1900 leap bug)
_EXCEL_EPOCH = date(1899, 12, 30)


def to_date(raw) -> Optional[date]:
    """Convert a raw date value into a date object.

    Accepts:
    - ISO dates, optionally with a time part ("2025-09-15", "2025-09-15T10:00:00")
    - "YYYY/MM/DD" and "DD/MM/YYYY" (a 4-digit first segment means year first)
    - OFX-style "YYYYMMDD" (trailing time and timezone are ignored)
    - date and datetime objects (time is dropped)
    - Excel serial day numbers
    - textual dates such as "15 Sep 2025" (day first)

    Returns:
        Date object, or None when the value cannot be interpreted
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, (int, float, Decimal)):
        return _from_excel_serial(raw)

    date_str = str(raw).strip()
    if not date_str:
        return None

    match = _ISO_RE.match(date_str)
    if match:
        return _safe_date(*match.groups())

    match = _SLASH_RE.match(date_str)
    if match:
        first, second, third = match.groups()
        if len(first) == 4:
            return _safe_date(first, second, third)
        if len(third) == 4:
            return _safe_date(third, second, first)
        return None

    match = _COMPACT_RE.match(date_str)
    if match:
        return _safe_date(*match.groups())

    # Free-form text needs at least a month name to be unambiguous
    if re.search(r"[a-zA-Z]", date_str):
        try:
            return date_parser.parse(date_str, dayfirst=True).date()
        except (ValueError, OverflowError):
            return None
    return None


def normalize_date(raw) -> Optional[str]:
    """Normalize a raw date value to an ISO "YYYY-MM-DD" string.

    Already-ISO strings come back unchanged. Returns None instead of raising
    so the caller can decide to skip the row.
    """
    parsed = to_date(raw)
    if parsed is None:
        return None
    return parsed.isoformat()


def _safe_date(year, month, day) -> Optional[date]:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def _from_excel_serial(serial) -> Optional[date]:
    try:
        days = int(serial)
    except (ValueError, OverflowError):
        return None
    if days <= 0 or days > 2958465:
        return None
    return _EXCEL_EPOCH + timedelta(days=days)


def parse_date(date_str: str) -> date:
    """Parse a user-supplied date string into a date object.

    Supports the formats of ``to_date`` plus relative dates:
    "today", "yesterday", "tomorrow", "last/this/next month|year|week".

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    elif date_str.startswith("next "):
        period = date_str[5:]
        if period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=1)
        elif period == "week":
            return today + timedelta(days=(7 - today.weekday()))

    parsed = to_date(date_str)
    if parsed is None:
        raise ValueError(f"Could not parse date '{date_str}'")
    return parsed


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a specified period.

    Args:
        period: Period string (this-month, this-year, last-month, last-year)

    Returns:
        Tuple of (start_date, end_date) for the specified period

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        start_date = today.replace(day=1)
        end_date = start_date + relativedelta(months=1) - timedelta(days=1)
        return (start_date, end_date)

    elif period == "this-year":
        return (today.replace(month=1, day=1), today.replace(month=12, day=31))

    elif period == "last-month":
        start_date = (today - relativedelta(months=1)).replace(day=1)
        end_date = today.replace(day=1) - timedelta(days=1)
        return (start_date, end_date)

    elif period == "last-year":
        start_date = today.replace(month=1, day=1) - relativedelta(years=1)
        end_date = today.replace(month=1, day=1) - timedelta(days=1)
        return (start_date, end_date)

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-month, this-year, last-month, last-year"
    )
