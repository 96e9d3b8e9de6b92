"""Main CLI entry point."""

import logging

import click
from fintrack.database.factories import create_sqlite_database

# Import and register all commands at module level
from fintrack.cli.commands import (
    account,
    card,
    category,
    tag,
    import_cmd,
    import_request,
    installment,
    suggest,
    summary,
    validate,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINTRACK_DB_PATH environment variable)",
    envvar="FINTRACK_DB_PATH",
)
@click.option(
    "--user",
    help="Owning user of the data (overrides FINTRACK_USER environment variable)",
    envvar="FINTRACK_USER",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level (overrides FINTRACK_LOG_LEVEL environment variable)",
    envvar="FINTRACK_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, user: str | None, log_level: str):
    """Fintrack - Personal finance import and categorization.

    Import bank statements (OFX, XLSX, JSON), categorize transactions,
    record installment purchases and reconcile account balances.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path, user_id=user)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
card.register_commands(cli)
category.register_commands(cli)
tag.register_commands(cli)
import_cmd.register_commands(cli)
import_request.register_commands(cli)
installment.register_commands(cli)
suggest.register_commands(cli)
summary.register_commands(cli)
validate.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
