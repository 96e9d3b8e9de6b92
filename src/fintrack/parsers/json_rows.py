"""JSON transaction payload parsing (chat assistant and API exports)."""

import json
import logging
from typing import Any, Optional

from fintrack.domain.entities import ParsedRow
from fintrack.domain.errors import ParseError
from fintrack.parsers.progress import ProgressCallback, ProgressReporter
from fintrack.utils.amount_parser import is_valid_amount, parse_amount

logger = logging.getLogger(__name__)


def load_json_payload(text: str | bytes) -> Any:
    """Decode JSON text, raising ParseError on malformed input."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Could not read JSON payload: {e}")


def _tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    return tuple(str(tag).strip() for tag in value if str(tag).strip())


def parse_json_rows(payload: Any, progress: Optional[ProgressCallback] = None) -> list[ParsedRow]:
    """Parse a list of transaction objects, or an object holding a ``transactions`` list.

    Each object uses the import request keys: ``date``, ``description``,
    ``amount``, ``type``, ``category`` and ``tags``. Incomplete objects are
    logged and skipped.

    Raises:
        ParseError: If the payload holds no transaction list
    """
    if isinstance(payload, dict):
        payload = payload.get("transactions")
    if not isinstance(payload, list):
        raise ParseError("JSON payload must be a list of transactions or contain a 'transactions' list")

    reporter = ProgressReporter(len(payload), progress)
    rows: list[ParsedRow] = []
    for index, item in enumerate(payload):
        reporter.update(index + 1)
        if not isinstance(item, dict):
            logger.warning("JSON item %d skipped: not an object", index)
            continue

        raw_date = item.get("date")
        description = item.get("description")
        raw_amount = item.get("amount")
        if not raw_date or not description or raw_amount in (None, ""):
            logger.warning("JSON item %d skipped: missing date, description or amount", index)
            continue

        amount = parse_amount(raw_amount)
        if not is_valid_amount(amount):
            logger.warning("JSON item %d skipped: invalid amount %r", index, raw_amount)
            continue

        rows.append(
            ParsedRow(
                date=raw_date,
                description=str(description).strip(),
                amount=amount,
                type_hint=item.get("type"),
                category_hint=item.get("category") or None,
                tags_hint=_tags(item.get("tags")),
                external_id=str(item["id"]) if item.get("id") is not None else None,
                row_number=index,
            )
        )

    reporter.finish()
    return rows
