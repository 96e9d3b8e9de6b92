"""Account management commands."""

import click
from fintrack.cli.account_resolution import resolve_account_or_exit
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.account import AccountService
from fintrack.domain.errors import DomainError
from fintrack.domain.ledger import LedgerService
from fintrack.utils.amount_parser import parse_amount


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--bank", help="Bank name (defaults to account name if not provided)")
@click.option("--opening-balance", default="0", help="Balance before the first transaction")
@click.pass_context
def create_account(ctx, name: str, bank: str | None, opening_balance: str):
    """Create a new account.

    If --bank is not provided, the bank name will be set to the account name.

    Examples:
        fintrack account create "Nubank"
        fintrack account create "Conta Corrente" --bank "Itaú" --opening-balance 1500,00
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    bank_name = bank if bank is not None else name
    balance = parse_amount(opening_balance)
    if not balance.is_finite():
        click.echo(f"Error: Invalid opening balance '{opening_balance}'", err=True)
        ctx.exit(1)

    try:
        account_id = service.create_account(name=name, bank_name=bank_name, opening_balance=balance)
        click.echo(f"Created account '{name}' (ID: {account_id})")
        if bank is None:
            click.echo(f"Bank name set to '{bank_name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for acc in accounts:
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | Bank: {acc.bank_name:15s} | Balance: {acc.balance:>12.2f}")


@account_group.command("reconcile")
@click.argument("account", metavar="ACCOUNT")
@click.option("--fix", is_flag=True, help="Overwrite the stored balance with the replayed one")
@click.pass_context
def reconcile_account(ctx, account: str, fix: bool):
    """Compare an account's balance with a replay of its transactions.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    service = LedgerService(db)

    try:
        check = service.reconcile_account(account_id)
        click.echo(f"Stored balance:   {check.stored_balance:>12.2f}")
        click.echo(f"Replayed balance: {check.expected_balance:>12.2f}")
        if check.is_consistent:
            click.echo("Balance is consistent.")
            return
        click.echo(f"Difference:       {check.difference:>12.2f}")
        if fix:
            service.rebuild_balance(account_id)
            click.echo("Balance rebuilt from transactions.")
        else:
            click.echo("Run again with --fix to rebuild the stored balance.")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
