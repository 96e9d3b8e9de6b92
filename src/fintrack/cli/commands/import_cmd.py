"""Statement import command."""

from pathlib import Path

import click
from fintrack.cli.account_resolution import resolve_account_or_exit
from fintrack.cli.engine_loading import keywords_option, load_engine_or_exit
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.account import AccountService
from fintrack.domain.entities import MappingAction
from fintrack.domain.errors import DomainError
from fintrack.domain.import_service import ImportService, ImportSession
from fintrack.domain.mapping import MappingPlan
from fintrack.parsers.json_rows import load_json_payload, parse_json_rows
from fintrack.parsers.worker import PROCESS_OFX, PROCESS_XLSX, ImportWorker, run_parse_job

FORMATS_BY_SUFFIX = {".ofx": "ofx", ".qfx": "ofx", ".xlsx": "xlsx", ".xlsm": "xlsx", ".json": "json"}


def _detect_format(path: str) -> str | None:
    return FORMATS_BY_SUFFIX.get(Path(path).suffix.lower())


def _read_text(path: str) -> str:
    raw = Path(path).read_bytes()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        # Brazilian banks commonly export OFX in Latin-1
        return raw.decode("latin-1")


def _parse_file(path: str, file_format: str) -> tuple[list, list[str]]:
    """Parse a statement file. Spreadsheets and OFX are parsed on the import worker."""
    if file_format == "json":
        return parse_json_rows(load_json_payload(Path(path).read_bytes())), []

    if file_format == "ofx":
        message_type, data = PROCESS_OFX, {"text": _read_text(path)}
    else:
        message_type, data = PROCESS_XLSX, {"content": Path(path).read_bytes()}

    with ImportWorker() as worker, click.progressbar(length=100, label="Parsing") as bar:
        shown = {"percent": 0}

        def on_progress(processed: int, total: int) -> None:
            percent = processed * 100 // total if total else 100
            bar.update(percent - shown["percent"])
            shown["percent"] = percent

        return run_parse_job(worker, message_type, data, on_progress=on_progress)


def _plan_entries(plan: MappingPlan) -> list:
    return list(plan.categories) + list(plan.tags)


def _show_plan(plan: MappingPlan) -> None:
    entries = _plan_entries(plan)
    if not entries:
        return
    click.echo("\nCategory and tag mapping:")
    for number, entry in enumerate(entries, start=1):
        kind = f"{entry.type.value} category" if hasattr(entry, "type") else "tag"
        click.echo(f"  [{number}] {entry.xlsx_name} ({kind}, {entry.count} row(s)) -> {entry.action.value}")


def _review_corrections(session: ImportSession, accept_all: bool, assume_yes: bool) -> None:
    corrections = session.corrections()
    if not corrections:
        return
    click.echo(f"\n{len(corrections)} suggested type correction(s):")
    for index, row, result in corrections:
        click.echo(f"  Row {index + 1}: {row.date} {row.description} {row.amount:.2f}: {result.type_correction_reason}")

    if accept_all:
        session.accept_type_corrections()
    elif not assume_yes:
        accepted = [
            index
            for index, row, result in corrections
            if click.confirm(f"Change row {index + 1} to {result.corrected_type.value}?", default=True)
        ]
        session.accept_type_corrections(accepted)


def _review_mappings(session: ImportSession, assume_yes: bool) -> None:
    while True:
        _show_plan(session.plan)
        pending = [e for e in _plan_entries(session.plan) if e.action is not MappingAction.MAP]
        if assume_yes or not pending:
            return
        answer = click.prompt(
            "Number to flip between create and ignore (blank to continue)", default="", show_default=False
        ).strip()
        if not answer:
            return
        entries = _plan_entries(session.plan)
        if not answer.isdigit() or not 1 <= int(answer) <= len(entries):
            click.echo(f"Error: No mapping numbered '{answer}'", err=True)
            continue
        entry = entries[int(answer) - 1]
        try:
            session.plan.flip(entry.xlsx_name, getattr(entry, "type", None))
        except DomainError as e:
            click.echo(f"Error: {e}", err=True)


@click.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", required=True, help="Account name or ID receiving the transactions")
@click.option(
    "--format",
    "file_format",
    type=click.Choice(["ofx", "xlsx", "json"]),
    help="File format (detected from the extension by default)",
)
@keywords_option
@click.option("--accept-corrections", is_flag=True, help="Accept every suggested type correction")
@click.option(
    "--auto-create/--no-auto-create",
    default=True,
    show_default=True,
    help="Create unknown categories and tags (otherwise they are ignored)",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def import_file(
    ctx,
    file: str,
    account: str,
    file_format: str | None,
    keywords: str | None,
    accept_corrections: bool,
    auto_create: bool,
    assume_yes: bool,
):
    """Import transactions from an OFX, XLSX or JSON file.

    Transactions are categorized from their descriptions. Suggested type
    corrections and new categories/tags are shown for confirmation before
    anything is stored.

    Examples:
        fintrack import extrato.ofx --account Nubank
        fintrack import planilha.xlsx --account 1 --no-auto-create
        fintrack import export.json --account Nubank --accept-corrections --yes
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    engine = load_engine_or_exit(ctx, keywords)

    file_format = file_format or _detect_format(file)
    if file_format is None:
        click.echo("Error: Could not detect the file format; use --format", err=True)
        ctx.exit(1)

    service = ImportService(db, engine)
    try:
        rows, parse_errors = _parse_file(file, file_format)
        session = service.prepare(rows, auto_create=auto_create)
        session.errors[:0] = parse_errors

        if not session.rows:
            click.echo("No valid transactions found in file.")
            for error in session.errors:
                click.echo(f"  {error}", err=True)
            return

        _review_corrections(session, accept_corrections, assume_yes)
        service.refresh_plan(session)

        warnings = session.warnings()
        if warnings:
            click.echo(f"\n{len(warnings)} warning(s):")
            for index, message in warnings:
                click.echo(f"  Row {index + 1}: {message}")

        _review_mappings(session, assume_yes)

        if not assume_yes and not click.confirm(f"\nImport {len(session.rows)} transaction(s)?", default=True):
            click.echo("Import cancelled.")
            return

        result = service.commit(session, account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result.imported} transactions")
    click.echo(f"  Duplicates: {result.duplicates}")
    click.echo(f"  Errors: {len(result.errors)}")
    for error in result.errors:
        click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_file)
