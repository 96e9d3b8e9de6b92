"""Categorization suggestion command."""

import click
from fintrack.cli.engine_loading import keywords_option, load_engine_or_exit
from fintrack.domain.entities import TransactionType
from fintrack.utils.amount_parser import parse_amount


@click.command("suggest")
@click.argument("description")
@click.option("--amount", default="0", help="Transaction amount")
@click.option(
    "--type", "txn_type", type=click.Choice([t.value for t in TransactionType]), help="Type claimed by the source"
)
@keywords_option
@click.pass_context
def suggest(ctx, description: str, amount: str, txn_type: str | None, keywords: str | None):
    """Show the category and type the engine suggests for a description.

    Examples:
        fintrack suggest "PIX recebido de João Silva" --amount 150 --type expense
    """
    engine = load_engine_or_exit(ctx, keywords)
    result = engine.categorize(description, parse_amount(amount), txn_type)

    click.echo(f"Category:   {result.category}")
    click.echo(f"Confidence: {result.confidence}% ({result.method})")
    if result.matched_keyword:
        click.echo(f"Keyword:    {result.matched_keyword}")
    if result.corrected_type is not None:
        click.echo(f"Type:       {result.corrected_type.value} ({result.type_correction_reason})")
    for warning in result.validation_warnings:
        click.echo(f"Warning: {warning}")


def register_commands(cli):
    """Register suggest command with main CLI."""
    cli.add_command(suggest)
