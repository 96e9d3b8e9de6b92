"""Installment purchase commands."""

import uuid

import click
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.errors import DomainError
from fintrack.domain.installments import InstallmentService
from fintrack.utils.amount_parser import parse_amount
from fintrack.utils.date_parser import parse_date


@click.group()
def installment_group():
    """Record installment purchases."""
    pass


@installment_group.command("add")
@click.argument("description")
@click.option("--total", required=True, help="Purchase total")
@click.option("--count", type=int, default=1, show_default=True, help="Number of installments (1-24)")
@click.option("--first-date", default="today", show_default=True, help="Date of the first installment")
@click.option("--card", "card_id", type=int, help="Card ID charged with the purchase")
@click.option("--category", "category_id", type=int, help="Expense category ID")
@click.option("--account", "account_id", type=int, help="Account ID")
@click.option("--id", "unique_id", help="Purchase ID printed by an earlier run; reuse it to retry without duplicating")
@click.pass_context
def add_purchase(
    ctx,
    description: str,
    total: str,
    count: int,
    first_date: str,
    card_id: int | None,
    category_id: int | None,
    account_id: int | None,
    unique_id: str | None,
):
    """Record a purchase split into monthly installments.

    Each run records a new purchase and prints its ID. Passing that ID back
    with --id makes a retry a no-op when the first attempt was recorded.

    Examples:
        fintrack installment add "Notebook" --total 1200 --count 3 --first-date 2025-01-10 --card 1
    """
    unique_id = unique_id or uuid.uuid4().hex
    service = InstallmentService(ctx.obj["db"])
    try:
        start = parse_date(first_date)
    except ValueError as e:
        click.echo(f"Error: Invalid first date: {e}", err=True)
        ctx.exit(1)

    try:
        result = service.create_purchase(
            description=description,
            total_amount=parse_amount(total),
            count=count,
            first_date=start,
            card_id=card_id,
            category_id=category_id,
            account_id=account_id,
            unique_id=unique_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)
    if not result.created:
        click.echo(f"Purchase already recorded (parent transaction {result.parent_id}); nothing changed.")
        return
    click.echo(f"Recorded {len(result.installment_ids)} installment(s) (parent transaction {result.parent_id})")
    click.echo(f"Purchase ID: {unique_id}")


@installment_group.command("list")
@click.argument("parent_id", type=int)
@click.pass_context
def list_installments(ctx, parent_id: int):
    """List the installments of a purchase."""
    service = InstallmentService(ctx.obj["db"])
    try:
        installments = service.list_installments(parent_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    for txn in installments:
        click.echo(
            f"{txn.installment_number:2d}/{txn.installments_count:<2d} | {txn.date} | "
            f"{txn.amount:>10.2f} | {txn.description}"
        )


def register_commands(cli):
    """Register installment commands with main CLI."""
    cli.add_command(installment_group, name="installment")
