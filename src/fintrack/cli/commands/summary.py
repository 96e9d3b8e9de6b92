"""Period summary command."""

import click
from fintrack.cli.account_resolution import resolve_account_or_exit
from fintrack.cli.date_filters import period_options, resolve_period
from fintrack.domain.account import AccountService
from fintrack.domain.ledger import LedgerService


@click.command("summary")
@period_options
@click.option("--account", help="Only count transactions of this account (name or ID)")
@click.pass_context
def summary(
    ctx,
    period_name: str | None,
    month: str | None,
    start_date: str | None,
    end_date: str | None,
    account: str | None,
):
    """Show income, expenses and balance for a period.

    Both ends of the period are included. The total account balance is the
    current balance of all accounts, whatever the period.

    Examples:
        fintrack summary --month 2025-09
        fintrack summary --period last-month --account Nubank
    """
    db = ctx.obj["db"]
    period = resolve_period(ctx, period_name=period_name, month=month, start_date=start_date, end_date=end_date)

    account_id = resolve_account_or_exit(ctx, AccountService(db), account) if account else None
    result = LedgerService(db).summary(period.start, period.end, account_id=account_id)

    click.echo(f"\nSummary {period.start} to {period.end}:")
    click.echo("-" * 40)
    click.echo(f"Income:          {result.total_income:>14.2f}")
    click.echo(f"Expenses:        {result.total_expenses:>14.2f}")
    click.echo(f"Period balance:  {result.period_balance:>14.2f}")
    click.echo(f"Account balance: {result.total_account_balance:>14.2f}")
    click.echo(f"Transactions:    {result.transaction_count:>14d}")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
