"""XLSX spreadsheet parsing."""

import io
import logging
import zipfile
from typing import Any, Iterable, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from fintrack.domain.entities import ParsedRow
from fintrack.domain.errors import ParseError
from fintrack.parsers.progress import ProgressCallback, ProgressReporter
from fintrack.utils.amount_parser import is_valid_amount, parse_amount

logger = logging.getLogger(__name__)

# Header synonyms per column role, matched as case-insensitive substrings.
COLUMN_SYNONYMS = {
    "date": ("data", "date"),
    "description": ("desc", "memo"),
    "amount": ("valor", "amount"),
    "type": ("tipo", "type"),
    "category": ("categoria", "category"),
    "tags": ("tag", "etiqueta"),
}


def detect_columns(headers: Sequence[Any]) -> dict[str, int]:
    """Map each column role to the index of the first header that matches it.

    Roles with no matching header are left out of the result.
    """
    lowered = [str(h).strip().lower() if h is not None else "" for h in headers]
    columns = {}
    for role, synonyms in COLUMN_SYNONYMS.items():
        for index, header in enumerate(lowered):
            if header and any(synonym in header for synonym in synonyms):
                columns[role] = index
                break
    return columns


def _cell(row: Sequence[Any], columns: dict[str, int], role: str) -> Any:
    index = columns.get(role)
    if index is None or index >= len(row):
        return None
    value = row[index]
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _split_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    return tuple(tag.strip() for tag in str(value).split(",") if tag.strip())


def parse_xlsx_rows(
    headers: Sequence[Any],
    rows: Iterable[Sequence[Any]],
    progress: Optional[ProgressCallback] = None,
) -> list[ParsedRow]:
    """Parse spreadsheet rows already split into a header and data rows.

    Rows missing a date, description or amount, or whose amount does not
    parse to a non-zero number, are logged and skipped.

    Args:
        headers: Header row values
        rows: Data rows (sequences of cell values)
        progress: Optional ``(processed, total)`` callback

    Returns:
        List of parsed rows; amounts keep their source sign
    """
    columns = detect_columns(headers)
    missing = [role for role in ("date", "description", "amount") if role not in columns]
    if missing:
        logger.warning("Spreadsheet has no column for: %s", ", ".join(missing))

    data_rows = list(rows)
    reporter = ProgressReporter(len(data_rows), progress)
    parsed: list[ParsedRow] = []

    # Row 1 is the header
    for index, row in enumerate(data_rows, start=1):
        row_number = index + 1
        reporter.update(index)
        if not row or all(value is None or value == "" for value in row):
            continue

        raw_date = _cell(row, columns, "date")
        description = _cell(row, columns, "description")
        raw_amount = _cell(row, columns, "amount")
        if raw_date is None or description is None or raw_amount is None:
            logger.warning("Row %d skipped: missing date, description or amount", row_number)
            continue

        amount = parse_amount(raw_amount)
        if not is_valid_amount(amount):
            logger.warning("Row %d skipped: invalid amount %r", row_number, raw_amount)
            continue

        type_hint = _cell(row, columns, "type")
        category = _cell(row, columns, "category")
        parsed.append(
            ParsedRow(
                date=raw_date,
                description=str(description),
                amount=amount,
                type_hint=str(type_hint) if type_hint is not None else None,
                category_hint=str(category) if category is not None else None,
                tags_hint=_split_tags(_cell(row, columns, "tags")),
                row_number=row_number,
            )
        )

    reporter.finish()
    logger.info("Spreadsheet parsed: %d of %d rows kept", len(parsed), len(data_rows))
    return parsed


def read_xlsx(content: bytes) -> tuple[list[Any], list[tuple[Any, ...]]]:
    """Decode the first worksheet of an XLSX file into (headers, rows).

    Raises:
        ParseError: If the content is not a readable XLSX workbook
    """
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise ParseError(f"Could not read XLSX file: {e}")

    try:
        sheet = workbook.worksheets[0]
        all_rows = list(sheet.iter_rows(values_only=True))
    finally:
        workbook.close()

    if not all_rows:
        return [], []
    return list(all_rows[0]), all_rows[1:]


def parse_xlsx(content: bytes, progress: Optional[ProgressCallback] = None) -> list[ParsedRow]:
    """Parse XLSX bytes into parsed rows (first worksheet, first row as header)."""
    headers, rows = read_xlsx(content)
    return parse_xlsx_rows(headers, rows, progress=progress)
