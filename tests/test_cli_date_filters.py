"""Tests for resolving CLI period options."""

from datetime import date

import click
import pytest

from fintrack.cli.date_filters import month_period, resolve_period
from fintrack.domain.entities import Period
from fintrack.utils.date_parser import get_date_range


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def _resolve_error(capsys, **options) -> str:
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_period(_ctx(), **options)
    assert excinfo.value.exit_code == 1
    return capsys.readouterr().err


def test_default_is_current_month():
    start, end = get_date_range("this-month")
    assert resolve_period(_ctx()) == Period(start=start, end=end)


def test_named_period():
    start, end = get_date_range("last-year")
    assert resolve_period(_ctx(), period_name="last-year") == Period(start=start, end=end)


@pytest.mark.parametrize(
    "month, expected",
    [
        ("2025-09", Period(date(2025, 9, 1), date(2025, 9, 30))),
        ("2024-02", Period(date(2024, 2, 1), date(2024, 2, 29))),
        ("2025-12", Period(date(2025, 12, 1), date(2025, 12, 31))),
    ],
)
def test_month_period_covers_first_to_last_day(month, expected):
    assert month_period(month) == expected
    assert resolve_period(_ctx(), month=month) == expected


def test_explicit_dates_are_kept_as_given():
    period = resolve_period(_ctx(), start_date="01/09/2025", end_date="2025-09-15")
    assert period == Period(date(2025, 9, 1), date(2025, 9, 15))


def test_single_day_period():
    period = resolve_period(_ctx(), start_date="2025-09-15", end_date="2025-09-15")
    assert period.start == period.end == date(2025, 9, 15)


@pytest.mark.parametrize(
    "options",
    [
        {"period_name": "this-month", "start_date": "2025-01-01"},
        {"period_name": "this-month", "month": "2025-01"},
        {"month": "2025-01", "end_date": "2025-01-31"},
    ],
)
def test_rejects_more_than_one_way_of_giving_the_period(capsys, options):
    assert "cannot be combined" in _resolve_error(capsys, **options)


def test_rejects_half_open_range(capsys):
    assert "Both --start-date and --end-date are required" in _resolve_error(capsys, start_date="2025-01-01")


def test_rejects_reversed_range(capsys):
    err = _resolve_error(capsys, start_date="2025-10-01", end_date="2025-09-30")
    assert "Start date 2025-10-01 is after end date 2025-09-30" in err


def test_rejects_invalid_month(capsys):
    assert "Expected: YYYY-MM" in _resolve_error(capsys, month="2025-13")


def test_rejects_invalid_date(capsys):
    assert "Invalid date" in _resolve_error(capsys, start_date="not a date", end_date="2025-09-30")
