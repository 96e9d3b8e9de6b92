"""OFX statement parsing.

OFX 1.x is SGML without closing tags for leaf elements, OFX 2.x is XML, and
bank exports mix both freely. Transactions are therefore located by scanning
``<STMTTRN>`` blocks and reading leaf values with patterns instead of a full
SGML parser.
"""

import logging
import re
from typing import Optional

from fintrack.domain.entities import ParsedRow
from fintrack.domain.categorization import normalize_text
from fintrack.parsers.progress import ProgressCallback, ProgressReporter
from fintrack.utils.amount_parser import is_valid_amount, parse_amount

logger = logging.getLogger(__name__)

_BLOCK_RE = re.compile(r"<STMTTRN>(.*?)(?:</STMTTRN>|(?=<STMTTRN>)|(?=</BANKTRANLIST>)|\Z)", re.S | re.I)
_DATE_RE = re.compile(r"<DTPOST(?:ED)?>\s*(\d{8})", re.I)

INCOME_TRNTYPES = {"CREDIT", "DEP", "DEPOSIT", "INT", "DIV"}
EXPENSE_TRNTYPES = {"DEBIT", "WITHDRAWAL", "PAYMENT", "FEE", "SRVCHG", "ATM", "POS", "CHECK"}

# Coarse memo keywords applied before the full categorization engine runs.
OFX_FALLBACK_CATEGORIES = (
    (("mercado", "supermercado", "restaurante", "padaria", "ifood", "lanchonete"), "Alimentação"),
    (("posto", "uber", "combustivel", "estacionamento", "pedagio"), "Transporte"),
    (("farmacia", "drogaria", "hospital", "clinica"), "Saúde"),
    (("aluguel", "condominio", "energia", "conta de luz", "internet"), "Moradia"),
    (("netflix", "spotify", "cinema"), "Lazer"),
    (("salario", "proventos"), "Salário"),
)


def _tag_value(block: str, tag: str) -> Optional[str]:
    match = re.search(rf"<{tag}>([^<\r\n]*)", block, re.I)
    if match is None:
        return None
    value = match.group(1).strip()
    return value or None


def fallback_category(memo: str) -> Optional[str]:
    """Best-effort category for an OFX memo from the coarse keyword table."""
    text = normalize_text(memo)
    for keywords, category in OFX_FALLBACK_CATEGORIES:
        if any(keyword in text for keyword in keywords):
            return category
    return None


def parse_ofx(text: str, progress: Optional[ProgressCallback] = None) -> list[ParsedRow]:
    """Parse OFX text into parsed rows.

    The amount of each row is the absolute value; the sign of ``<TRNAMT>`` (or
    an explicit ``<TRNTYPE>``) becomes the type hint. Blocks without a date,
    with an unparsable or zero amount are logged and skipped.

    Args:
        text: Decoded OFX content
        progress: Optional ``(processed, total)`` callback

    Returns:
        List of parsed rows in file order
    """
    blocks = _BLOCK_RE.findall(text or "")
    reporter = ProgressReporter(len(blocks), progress)
    rows: list[ParsedRow] = []

    for index, block in enumerate(blocks, start=1):
        date_match = _DATE_RE.search(block)
        raw_amount = _tag_value(block, "TRNAMT")
        if date_match is None or raw_amount is None:
            logger.warning("OFX transaction %d skipped: missing date or amount", index)
            reporter.update(index)
            continue

        amount = parse_amount(raw_amount)
        if not is_valid_amount(amount):
            logger.warning("OFX transaction %d skipped: invalid amount %r", index, raw_amount)
            reporter.update(index)
            continue

        memo = _tag_value(block, "MEMO")
        name = _tag_value(block, "NAME")
        check_number = _tag_value(block, "CHECKNUM")
        if memo:
            description = memo
        elif name:
            description = name
        elif check_number:
            description = f"Cheque {check_number}"
        else:
            description = "Transação sem descrição"

        raw_date = date_match.group(1)
        type_hint = "income" if amount > 0 else "expense"
        trn_type = (_tag_value(block, "TRNTYPE") or "").upper()
        if trn_type in INCOME_TRNTYPES:
            type_hint = "income"
        elif trn_type in EXPENSE_TRNTYPES:
            type_hint = "expense"

        rows.append(
            ParsedRow(
                date=f"{raw_date[0:4]}-{raw_date[4:6]}-{raw_date[6:8]}",
                description=description,
                amount=abs(amount),
                type_hint=type_hint,
                category_hint=fallback_category(description),
                external_id=_tag_value(block, "FITID"),
                row_number=index,
            )
        )
        reporter.update(index)

    reporter.finish()
    logger.info("OFX parsed: %d of %d transactions kept", len(rows), len(blocks))
    return rows
