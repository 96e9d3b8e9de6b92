"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

NOT_A_NUMBER = Decimal("NaN")
CENT = Decimal("0.01")

_CURRENCY_RE = re.compile(r"R\$|[$€£¥]")
_NUMBER_RE = re.compile(r"^(\d+(\.\d*)?|\.\d+)$")


def parse_amount(raw) -> Decimal:
    """Parse a raw amount into a Decimal.

    Handles various formats:
    - "123.45", "123,45"
    - "R$ 1.234,56", "$1,234.56"
    - "-123.45", "123.45-"
    - "(123.45)" (negative in parentheses)
    - int, float and Decimal values

    Args:
        raw: Amount as found in the source

    Returns:
        Decimal amount, or ``NOT_A_NUMBER`` (``Decimal("NaN")``) when the input
        cannot be parsed. Callers decide whether to skip the row.
    """
    if raw is None or isinstance(raw, bool):
        return NOT_A_NUMBER
    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, int):
        return Decimal(raw)
    if isinstance(raw, float):
        if raw != raw or raw in (float("inf"), float("-inf")):
            return NOT_A_NUMBER
        return Decimal(str(raw))

    amount_str = str(raw).strip()
    if not amount_str:
        return NOT_A_NUMBER

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and every kind of whitespace
    amount_str = _CURRENCY_RE.sub("", amount_str)
    amount_str = "".join(amount_str.split())

    if amount_str.startswith("-"):
        is_negative = not is_negative
        amount_str = amount_str[1:]
    elif amount_str.startswith("+"):
        amount_str = amount_str[1:]
    elif amount_str.endswith("-"):
        is_negative = not is_negative
        amount_str = amount_str[:-1]

    amount_str = _normalize_separators(amount_str)
    if not _NUMBER_RE.match(amount_str):
        return NOT_A_NUMBER

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        return NOT_A_NUMBER
    return -amount if is_negative else amount


def _normalize_separators(amount_str: str) -> str:
    """Turn thousand/decimal separators of either convention into plain dot decimals."""
    if "," in amount_str and "." in amount_str:
        if amount_str.rfind(",") > amount_str.rfind("."):
            # 1.234,56
            return amount_str.replace(".", "").replace(",", ".")
        # 1,234.56
        return amount_str.replace(",", "")
    if "," in amount_str:
        if amount_str.count(",") > 1:
            return amount_str.replace(",", "")
        return amount_str.replace(",", ".")
    if amount_str.count(".") > 1:
        return amount_str.replace(".", "")
    return amount_str


def is_valid_amount(amount: Decimal) -> bool:
    """Return True for a finite, non-zero amount."""
    return amount.is_finite() and amount != 0


def to_cents(amount: Decimal) -> Decimal:
    """Round a finite amount to cents, halves away from zero.

    Amounts are stored with two decimal places, so validity checks run on the
    rounded value: ``0.001`` becomes ``0.00`` and is no longer a valid amount.
    """
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
