"""Domain model entities for fintrack.

These are pure data classes representing business concepts, independent of
database schema. Amounts are always non-negative Decimals; the direction of
money movement lives in ``TransactionType``.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"

    @property
    def label(self) -> str:
        return "receita" if self is TransactionType.INCOME else "despesa"


class MappingAction(str, Enum):
    """What to do with an imported free-text category or tag name."""

    MAP = "map"
    CREATE = "create"
    IGNORE = "ignore"


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    name: str
    bank_name: str
    opening_balance: Decimal
    balance: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Card:
    """Credit card domain entity.

    ``used_amount`` may exceed ``credit_limit``; that is a warning state.
    """

    id: int
    name: str
    credit_limit: Decimal
    used_amount: Decimal
    closing_day: int
    due_day: int
    created_at: datetime

    @property
    def available_limit(self) -> Decimal:
        return self.credit_limit - self.used_amount

    @property
    def is_over_limit(self) -> bool:
        return self.used_amount > self.credit_limit


@dataclass(frozen=True)
class Category:
    """Category domain entity, partitioned by transaction type."""

    id: int
    name: str
    type: TransactionType
    color: str
    created_at: datetime


@dataclass(frozen=True)
class Tag:
    """Tag domain entity. Tags are type-agnostic."""

    id: int
    name: str
    color: str
    is_active: bool = True


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    unique_id: str
    type: TransactionType
    amount: Decimal
    description: str
    date: date
    category_id: Optional[int] = None
    account_id: Optional[int] = None
    card_id: Optional[int] = None
    tags: tuple[Tag, ...] = ()
    notes: Optional[str] = None
    installments_count: int = 1
    installment_number: int = 1
    parent_transaction_id: Optional[int] = None
    imported_at: Optional[datetime] = None


@dataclass(frozen=True)
class ParsedRow:
    """Intermediate row produced by a format parser.

    Values are kept as found in the source; normalization happens later.
    """

    date: object
    description: str
    amount: object
    type_hint: Optional[str] = None
    category_hint: Optional[str] = None
    tags_hint: tuple[str, ...] = ()
    external_id: Optional[str] = None
    row_number: Optional[int] = None


@dataclass(frozen=True)
class NormalizedRow:
    """Canonical transaction shape ready for categorization and mapping."""

    date: date
    description: str
    amount: Decimal
    type: TransactionType
    category: Optional[str] = None
    tags: tuple[str, ...] = ()
    external_id: Optional[str] = None


@dataclass(frozen=True)
class CategorizationResult:
    """Suggestion returned by the categorization engine for one transaction."""

    category: str
    confidence: int
    method: str
    matched_keyword: Optional[str] = None
    corrected_type: Optional[TransactionType] = None
    type_correction_reason: Optional[str] = None
    validation_warnings: tuple[str, ...] = ()


@dataclass
class CategoryMapping:
    """Import-session decision for one free-text category name."""

    xlsx_name: str
    type: TransactionType
    count: int
    action: MappingAction
    resolved_category_id: Optional[int] = None


@dataclass
class TagMapping:
    """Import-session decision for one free-text tag name."""

    xlsx_name: str
    count: int
    action: MappingAction
    resolved_tag_id: Optional[int] = None


@dataclass(frozen=True)
class Period:
    """Inclusive date range."""

    start: date
    end: date


@dataclass(frozen=True)
class FinancialSummary:
    """Totals for a period. ``total_account_balance`` is a snapshot."""

    total_income: Decimal
    total_expenses: Decimal
    period_balance: Decimal
    total_account_balance: Decimal
    transaction_count: int


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of a data validation pass."""

    is_valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)
