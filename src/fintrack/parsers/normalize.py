"""Conversion of parsed rows into the canonical transaction shape."""

import logging
from typing import Iterable, Optional

from fintrack.domain.categorization import normalize_text
from fintrack.domain.entities import NormalizedRow, ParsedRow, TransactionType
from fintrack.domain.errors import ValidationError
from fintrack.utils.amount_parser import is_valid_amount, parse_amount, to_cents
from fintrack.utils.date_parser import to_date

logger = logging.getLogger(__name__)

INCOME_HINTS = ("income", "receita", "entrada", "credito", "credit", "c")
EXPENSE_HINTS = ("expense", "despesa", "saida", "debito", "debit", "d", "gasto")


def interpret_type_hint(hint: Optional[str]) -> Optional[TransactionType]:
    """Map a free-text type hint ("Receita", "D", "expense", ...) to a type."""
    text = normalize_text(hint or "")
    if not text:
        return None
    if text in INCOME_HINTS or any(len(h) > 1 and h in text for h in INCOME_HINTS):
        return TransactionType.INCOME
    if text in EXPENSE_HINTS or any(len(h) > 1 and h in text for h in EXPENSE_HINTS):
        return TransactionType.EXPENSE
    return None


def normalize_row(row: ParsedRow) -> NormalizedRow:
    """Normalize one parsed row.

    The amount becomes a positive Decimal rounded to cents; a negative source amount only
    decides the type when the row carries no usable type hint.

    Raises:
        ValidationError: If the date or amount cannot be normalized
    """
    txn_date = to_date(row.date)
    if txn_date is None:
        raise ValidationError(f"Invalid date: {row.date!r}")

    amount = parse_amount(row.amount)
    if amount.is_finite():
        amount = to_cents(amount)
    if not is_valid_amount(amount):
        raise ValidationError(f"Invalid amount: {row.amount!r}")

    txn_type = interpret_type_hint(row.type_hint)
    if txn_type is None:
        txn_type = TransactionType.INCOME if amount > 0 else TransactionType.EXPENSE

    description = " ".join(str(row.description).split())
    if not description:
        raise ValidationError("Missing description")

    category = row.category_hint.strip() if row.category_hint else None
    return NormalizedRow(
        date=txn_date,
        description=description,
        amount=abs(amount),
        type=txn_type,
        category=category or None,
        tags=tuple(t for t in row.tags_hint if t),
        external_id=row.external_id,
    )


def normalize_rows(rows: Iterable[ParsedRow]) -> tuple[list[NormalizedRow], list[str]]:
    """Normalize rows, collecting one error message per rejected row."""
    normalized = []
    errors = []
    for position, row in enumerate(rows, start=1):
        label = row.row_number if row.row_number is not None else position
        try:
            normalized.append(normalize_row(row))
        except ValidationError as e:
            logger.warning("Row %s skipped: %s", label, e)
            errors.append(f"Row {label}: {e}")
    return normalized, errors
