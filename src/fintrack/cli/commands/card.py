"""Credit card commands."""

import click
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.card import CardService
from fintrack.domain.errors import DomainError
from fintrack.utils.amount_parser import parse_amount


@click.group()
def card_group():
    """Manage credit cards."""
    pass


@card_group.command("create")
@click.argument("name", metavar="CARD_NAME")
@click.option("--limit", "credit_limit", required=True, help="Credit limit")
@click.option("--closing-day", type=int, required=True, help="Statement closing day (1-31)")
@click.option("--due-day", type=int, required=True, help="Payment due day (1-31)")
@click.pass_context
def create_card(ctx, name: str, credit_limit: str, closing_day: int, due_day: int):
    """Create a credit card.

    Examples:
        fintrack card create "Nubank Roxinho" --limit 5000 --closing-day 3 --due-day 10
    """
    service = CardService(ctx.obj["db"])
    limit = parse_amount(credit_limit)
    if not limit.is_finite():
        click.echo(f"Error: Invalid credit limit '{credit_limit}'", err=True)
        ctx.exit(1)

    try:
        card_id = service.create_card(name=name, credit_limit=limit, closing_day=closing_day, due_day=due_day)
        click.echo(f"Created card '{name}' (ID: {card_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@card_group.command("list")
@click.pass_context
def list_cards(ctx):
    """List credit cards with their used and available limits."""
    service = CardService(ctx.obj["db"])
    cards = service.list_cards()
    if not cards:
        click.echo("No cards found.")
        return

    click.echo("\nCards:")
    click.echo("-" * 80)
    for card in cards:
        line = (
            f"ID: {card.id:3d} | {card.name:20s} | Used: {card.used_amount:>10.2f} "
            f"| Limit: {card.credit_limit:>10.2f} | Available: {card.available_limit:>10.2f}"
        )
        if card.is_over_limit:
            line += " | OVER LIMIT"
        click.echo(line)


def register_commands(cli):
    """Register card commands with main CLI."""
    cli.add_command(card_group, name="card")
