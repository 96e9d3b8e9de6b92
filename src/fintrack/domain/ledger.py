"""Ledger reconciliation: period summaries, balance replay and data validation."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Sequence

from fintrack.database.base import Database
from fintrack.domain.entities import (
    Account,
    FinancialSummary,
    Period,
    Transaction,
    TransactionType,
    ValidationReport,
)
from fintrack.domain.errors import NotFoundError, ValidationError, account_not_found
from fintrack.utils.date_parser import to_date

logger = logging.getLogger(__name__)

_TYPES = {t.value for t in TransactionType}


def _type_value(txn_type: Any) -> Optional[str]:
    value = getattr(txn_type, "value", txn_type)
    return value if isinstance(value, str) else None


def safe_decimal(value: Any) -> Decimal:
    """Convert a stored amount to Decimal; missing or non-numeric values count as zero."""
    if value is None or value == "" or isinstance(value, bool):
        return Decimal("0")
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")
    return result if result.is_finite() else Decimal("0")


def signed_amount(txn: Any) -> Decimal:
    """Effect of one transaction on an account balance.

    The magnitude is used whatever sign is stored, so legacy signed rows
    replay the same way as normalized ones.
    """
    amount = abs(safe_decimal(txn.amount))
    if _type_value(txn.type) == TransactionType.INCOME.value:
        return amount
    if _type_value(txn.type) == TransactionType.EXPENSE.value:
        return -amount
    return Decimal("0")


def filter_by_period(transactions: Iterable[Any], period: Period) -> list[Any]:
    """Return the transactions dated within ``period``, both bounds included.

    Time components are ignored. Transactions whose date cannot be read are
    left out with a warning.
    """
    start = to_date(period.start)
    end = to_date(period.end)
    if start is None or end is None:
        raise ValidationError(f"Invalid period: {period.start!r} - {period.end!r}")

    selected = []
    for txn in transactions:
        txn_date = to_date(txn.date)
        if txn_date is None:
            logger.warning("Transaction %s has an invalid date %r; excluded from period", txn.id, txn.date)
            continue
        if start <= txn_date <= end:
            selected.append(txn)
    return selected


def summarize(
    transactions: Iterable[Any], period: Period, accounts: Iterable[Any] = ()
) -> FinancialSummary:
    """Compute the totals of a period.

    Args:
        transactions: Transactions to consider (any period)
        period: Inclusive date range
        accounts: Accounts whose current balances make up ``total_account_balance``

    Returns:
        FinancialSummary. Income and expenses are non-negative magnitudes;
        ``total_account_balance`` is a snapshot that ignores the period.
    """
    in_period = filter_by_period(transactions, period)
    total_income = sum(
        (abs(safe_decimal(t.amount)) for t in in_period if _type_value(t.type) == TransactionType.INCOME.value),
        Decimal("0"),
    )
    total_expenses = sum(
        (abs(safe_decimal(t.amount)) for t in in_period if _type_value(t.type) == TransactionType.EXPENSE.value),
        Decimal("0"),
    )
    total_account_balance = sum((safe_decimal(a.balance) for a in accounts), Decimal("0"))

    summary = FinancialSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        period_balance=total_income - total_expenses,
        total_account_balance=total_account_balance,
        transaction_count=len(in_period),
    )
    logger.debug("Summary for %s - %s: %s", period.start, period.end, summary)
    return summary


calculate_period_summary = summarize


def validate_financial_data(
    transactions: Optional[Iterable[Any]],
    accounts: Optional[Iterable[Any]] = None,
    signed_amounts: bool = False,
) -> ValidationReport:
    """Check transactions and accounts for inconsistent data.

    Every transaction needs an id, a type of income or expense, a date and a
    non-zero amount. Amounts must be positive; with ``signed_amounts`` the
    legacy convention (income positive, expense negative) is checked instead.

    Returns:
        ValidationReport with one message per violation, naming the transaction
    """
    errors: list[str] = []

    if transactions is None:
        errors.append("Transactions are missing")
        transactions = ()

    for index, txn in enumerate(transactions):
        txn_id = getattr(txn, "id", None)
        label = f"Transaction {txn_id}" if txn_id not in (None, "") else f"Transaction at position {index}"
        if txn_id in (None, ""):
            errors.append(f"{label} has no id")

        txn_type = _type_value(getattr(txn, "type", None))
        if txn_type not in _TYPES:
            errors.append(f"{label} has invalid type: {getattr(txn, 'type', None)!r}")

        raw_amount = getattr(txn, "amount", None)
        amount = safe_decimal(raw_amount)
        if amount == 0:
            errors.append(f"{label} has zero amount: {raw_amount!r}")
        elif signed_amounts:
            if txn_type == TransactionType.INCOME.value and amount < 0:
                errors.append(f"{label} is income with a negative amount: {raw_amount}")
            if txn_type == TransactionType.EXPENSE.value and amount > 0:
                errors.append(f"{label} is an expense with a positive amount: {raw_amount}")
        elif amount < 0:
            errors.append(f"{label} is {txn_type or 'untyped'} with a negative amount: {raw_amount}")

        if not getattr(txn, "date", None):
            errors.append(f"{label} has no date")

    if accounts is not None:
        for index, account in enumerate(accounts):
            account_id = getattr(account, "id", None)
            if account_id in (None, ""):
                errors.append(f"Account at position {index} has no id")
            if not getattr(account, "name", None):
                errors.append(f"Account {account_id} has no name")

    return ValidationReport(is_valid=not errors, errors=tuple(errors))


def apply_to_balance(balance: Decimal, transactions: Iterable[Any]) -> Decimal:
    """Apply transactions one by one to a balance."""
    for txn in transactions:
        balance += signed_amount(txn)
    return balance


def account_balance_from_transactions(account: Account, transactions: Iterable[Any]) -> Decimal:
    """Replay an account's balance from its opening balance and its transactions."""
    own = [t for t in transactions if getattr(t, "account_id", None) == account.id]
    return apply_to_balance(safe_decimal(account.opening_balance), own)


def find_sign_inconsistencies(transactions: Iterable[Any]) -> list[Any]:
    """Return transactions stored with a negative amount."""
    return [t for t in transactions if safe_decimal(t.amount) < 0]


@dataclass(frozen=True)
class BalanceCheck:
    """Stored versus replayed balance of one account."""

    account_id: int
    stored_balance: Decimal
    expected_balance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.stored_balance - self.expected_balance

    @property
    def is_consistent(self) -> bool:
        return self.difference == 0


class LedgerService:
    """Service for summaries and reconciliation against the store."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def summary(self, start_date: date, end_date: date, account_id: Optional[int] = None) -> FinancialSummary:
        """Summarize the user's transactions for a period.

        Args:
            start_date: First day of the period
            end_date: Last day of the period
            account_id: Restrict transactions (not the balance snapshot) to one account
        """
        transactions = self.db.list_transactions(account_id=account_id)
        return summarize(transactions, Period(start=start_date, end=end_date), self.db.list_accounts())

    def validate(self, signed_amounts: bool = False) -> ValidationReport:
        """Validate every transaction and account of the user."""
        return validate_financial_data(self.db.list_transactions(), self.db.list_accounts(), signed_amounts)

    def _require_account(self, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def reconcile_account(self, account_id: int) -> BalanceCheck:
        """Compare an account's stored balance with a full replay of its transactions.

        Raises:
            NotFoundError: If account not found
        """
        account = self._require_account(account_id)
        expected = account_balance_from_transactions(account, self.db.list_transactions(account_id=account_id))
        check = BalanceCheck(account_id=account_id, stored_balance=account.balance, expected_balance=expected)
        if not check.is_consistent:
            logger.warning(
                "Account %s balance drift: stored %s, replayed %s", account_id, account.balance, expected
            )
        return check

    def rebuild_balance(self, account_id: int) -> Decimal:
        """Overwrite an account's stored balance with its replayed balance."""
        check = self.reconcile_account(account_id)
        if not check.is_consistent:
            self.db.set_account_balance(account_id, check.expected_balance)
            logger.info("Account %s balance rebuilt to %s", account_id, check.expected_balance)
        return check.expected_balance

    def find_sign_inconsistencies(self) -> list[Transaction]:
        """Return the user's transactions stored with a negative amount."""
        return find_sign_inconsistencies(self.db.list_transactions())

    def fix_sign_inconsistencies(self) -> list[int]:
        """Store the magnitude of every negative amount, keeping its type.

        Balances are unaffected because replay already uses magnitudes.

        Returns:
            IDs of the repaired transactions
        """
        fixed = []
        for txn in self.find_sign_inconsistencies():
            self.db.update_transaction(txn.id, amount=abs(txn.amount))
            fixed.append(txn.id)
        if fixed:
            logger.info("Normalized the amount sign of %d transaction(s)", len(fixed))
        return fixed
