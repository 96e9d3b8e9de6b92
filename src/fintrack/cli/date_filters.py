"""Period options for commands that report on a date range."""

from datetime import date

import click
from dateutil.relativedelta import relativedelta

from fintrack.domain.entities import Period
from fintrack.utils.date_parser import get_date_range, parse_date

PERIOD_NAMES = ("this-month", "last-month", "this-year", "last-year")
DEFAULT_PERIOD = "this-month"


def period_options(func):
    """Add ``--period``, ``--month``, ``--start-date`` and ``--end-date`` to a command."""
    options = (
        click.option(
            "--period",
            "period_name",
            type=click.Choice(PERIOD_NAMES),
            help=f"Named period (default: {DEFAULT_PERIOD})",
        ),
        click.option("--month", help="Calendar month as YYYY-MM"),
        click.option("--start-date", help="First day of the period, included"),
        click.option("--end-date", help="Last day of the period, included"),
    )
    for option in reversed(options):
        func = option(func)
    return func


def month_period(month: str) -> Period:
    """Return the period covering a ``YYYY-MM`` month, first to last day.

    Raises:
        ValueError: If ``month`` is not a valid ``YYYY-MM`` string
    """
    try:
        first = date.fromisoformat(f"{month.strip()}-01")
    except ValueError:
        raise ValueError(f"Invalid month '{month}'. Expected: YYYY-MM")
    return Period(start=first, end=first + relativedelta(months=1, days=-1))


def _fail(ctx, message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    ctx.exit(1)


def resolve_period(
    ctx,
    *,
    period_name: str | None = None,
    month: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> Period:
    """Resolve period options into an inclusive Period, exiting on bad input.

    Exactly one way of giving the period may be used: a named period, a
    month, or both explicit dates. With none of them the current month is used.
    """
    given = []
    if period_name:
        given.append("--period")
    if month:
        given.append("--month")
    if start_date or end_date:
        given.append("--start-date/--end-date")
    if len(given) > 1:
        _fail(ctx, f"{' and '.join(given)} cannot be combined; give the period one way.")

    if month:
        try:
            return month_period(month)
        except ValueError as e:
            _fail(ctx, str(e))

    if start_date or end_date:
        if not (start_date and end_date):
            _fail(ctx, "Both --start-date and --end-date are required")
        try:
            start = parse_date(start_date)
            end = parse_date(end_date)
        except ValueError as e:
            _fail(ctx, f"Invalid date: {e}")
        if start > end:
            _fail(ctx, f"Start date {start} is after end date {end}")
        return Period(start=start, end=end)

    start, end = get_date_range(period_name or DEFAULT_PERIOD)
    return Period(start=start, end=end)
