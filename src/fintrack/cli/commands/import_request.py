"""JSON import request command."""

import json
from pathlib import Path

import click
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.errors import DomainError
from fintrack.domain.import_service import ImportService
from fintrack.parsers.json_rows import load_json_payload


@click.command("import-request")
@click.argument("request_file", type=click.Path(exists=True, dir_okay=False, allow_dash=True))
@click.pass_context
def import_request(ctx, request_file: str):
    """Run an import request and print the JSON response.

    REQUEST_FILE holds {"account_id": ..., "transactions": [...]}; use - for stdin.
    Invalid rows are reported in the response while valid rows are imported.
    """
    service = ImportService(ctx.obj["db"])
    if request_file == "-":
        text = click.get_text_stream("stdin").read()
    else:
        text = Path(request_file).read_text(encoding="utf-8")

    try:
        payload = load_json_payload(text)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    response = service.import_request(payload)
    click.echo(json.dumps(response, indent=2, ensure_ascii=False, default=str))
    if not response["success"]:
        ctx.exit(1)


def register_commands(cli):
    """Register import-request command with main CLI."""
    cli.add_command(import_request)
