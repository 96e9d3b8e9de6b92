"""Financial data validation command."""

import click
from fintrack.domain.ledger import LedgerService


@click.command("validate")
@click.option("--signed-amounts", is_flag=True, help="Check the legacy convention of negative expense amounts")
@click.option("--fix", is_flag=True, help="Store negative amounts as positive, keeping their type")
@click.pass_context
def validate(ctx, signed_amounts: bool, fix: bool):
    """Check stored transactions and accounts for inconsistent data."""
    service = LedgerService(ctx.obj["db"])

    if fix:
        fixed = service.fix_sign_inconsistencies()
        click.echo(f"Normalized {len(fixed)} transaction(s) with negative amounts.")

    report = service.validate(signed_amounts=signed_amounts)
    if report.is_valid:
        click.echo("No problems found.")
        return

    click.echo(f"{len(report.errors)} problem(s) found:")
    for error in report.errors:
        click.echo(f"  {error}")
    ctx.exit(1)


def register_commands(cli):
    """Register validate command with main CLI."""
    cli.add_command(validate)
