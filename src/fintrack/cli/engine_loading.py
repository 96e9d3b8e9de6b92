"""CLI helper for building the categorization engine."""

import click

from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.categorization import CategorizationEngine
from fintrack.domain.errors import ValidationError

keywords_option = click.option(
    "--keywords",
    type=click.Path(exists=True, dir_okay=False),
    envvar="FINTRACK_KEYWORDS",
    help="JSON keyword table replacing the built-in one (overrides FINTRACK_KEYWORDS)",
)


def load_engine_or_exit(ctx: click.Context, keywords_path: str | None) -> CategorizationEngine:
    """Build the engine from ``keywords_path`` or the built-in table."""
    if keywords_path is None:
        return CategorizationEngine()
    try:
        return CategorizationEngine.from_file(keywords_path)
    except ValidationError as e:
        handle_domain_error(ctx, e)
