"""CLI error handling helpers."""

import click

from fintrack.domain.errors import DomainError, ReconciliationError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, ReconciliationError) and error.needs_manual_reconciliation:
        click.echo(
            f"Transactions {list(error.orphan_ids)} were left behind and need manual cleanup.",
            err=True,
        )
    ctx.exit(1)
