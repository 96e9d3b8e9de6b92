"""Tests for date parsing and normalization."""

import pytest
from datetime import date, datetime, timedelta
from fintrack.utils.date_parser import get_date_range, normalize_date, parse_date, to_date


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2025-09-15", date(2025, 9, 15)),
        ("2025-09-15T10:30:00", date(2025, 9, 15)),
        ("15/09/2025", date(2025, 9, 15)),
        ("2025/09/15", date(2025, 9, 15)),
        ("15.09.2025", date(2025, 9, 15)),
        ("20250915", date(2025, 9, 15)),
        ("20250915120000[-3:BRT]", date(2025, 9, 15)),
        ("15 Sep 2025", date(2025, 9, 15)),
        (datetime(2025, 9, 15, 23, 59), date(2025, 9, 15)),
        (date(2025, 9, 15), date(2025, 9, 15)),
        (45915, date(2025, 9, 15)),
    ],
)
def test_to_date_formats(raw, expected):
    """Test the date formats found in statements."""
    assert to_date(raw) == expected


def test_slash_dates_resolved_by_position():
    """A 4-digit first segment means year first; otherwise day first."""
    assert to_date("2025/03/04") == date(2025, 3, 4)
    assert to_date("03/04/2025") == date(2025, 4, 3)


@pytest.mark.parametrize("raw", ["", "not a date", "31/02/2025", "2025-13-01", "12/05", None, True])
def test_to_date_returns_none_for_invalid(raw):
    """Invalid dates give None instead of raising."""
    assert to_date(raw) is None
    assert normalize_date(raw) is None


@pytest.mark.parametrize("iso", ["2025-09-15", "2024-02-29", "1999-12-31"])
def test_normalize_date_is_idempotent(iso):
    """An ISO date normalizes to itself."""
    assert normalize_date(iso) == iso
    assert normalize_date(normalize_date(iso)) == iso


def test_normalize_date_converts_to_iso():
    """Test conversion of other formats to ISO."""
    assert normalize_date("15/09/2025") == "2025-09-15"
    assert normalize_date("20250915") == "2025-09-15"


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today") == date.today()


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    assert parse_date("yesterday") == date.today() - timedelta(days=1)


def test_parse_this_month():
    """Test parsing 'this month'."""
    assert parse_date("this month") == date.today().replace(day=1)


def test_parse_invalid_date_raises():
    """Test that user-supplied garbage raises ValueError."""
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_get_date_range_this_month():
    """Test this-month range spans the whole month."""
    start, end = get_date_range("this-month")
    today = date.today()
    assert start == today.replace(day=1)
    assert start <= today <= end
    assert (end + timedelta(days=1)).day == 1


def test_get_date_range_last_year():
    """Test last-year range."""
    start, end = get_date_range("last-year")
    year = date.today().year - 1
    assert start == date(year, 1, 1)
    assert end == date(year, 12, 31)


def test_get_date_range_unknown():
    """Test unknown period raises."""
    with pytest.raises(ValueError):
        get_date_range("next-decade")
