"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from fintrack.domain.entities import (
    Account,
    Card,
    Category,
    Tag,
    Transaction,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for fintrack.

    Every instance is bound to one owning user (``user_id``); reads and writes
    never see rows of another user.
    """

    user_id: str

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Group writes into one commit; everything inside rolls back on error."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, name: str, bank_name: str, opening_balance: Decimal = Decimal("0")) -> int:
        """Create a new account whose balance starts at ``opening_balance``. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    @abstractmethod
    def set_account_balance(self, account_id: int, balance: Decimal) -> None:
        """Overwrite the stored balance of an account."""
        pass

    @abstractmethod
    def adjust_account_balance(self, account_id: int, delta: Decimal) -> None:
        """Add ``delta`` to the stored balance of an account."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    # Card operations
    @abstractmethod
    def create_card(
        self,
        name: str,
        credit_limit: Decimal,
        closing_day: int,
        due_day: int,
        used_amount: Decimal = Decimal("0"),
    ) -> int:
        """Create a new credit card. Returns card ID."""
        pass

    @abstractmethod
    def get_card(self, card_id: int) -> Optional[Card]:
        """Get card by ID."""
        pass

    @abstractmethod
    def list_cards(self) -> list[Card]:
        """List all cards."""
        pass

    @abstractmethod
    def adjust_card_used_amount(self, card_id: int, delta: Decimal) -> None:
        """Add ``delta`` to the used amount of a card."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str, type: TransactionType, color: str) -> int:
        """Create a new category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def find_category(self, name: str, type: Optional[TransactionType] = None) -> Optional[Category]:
        """Find a category by case-insensitive name, optionally within a type."""
        pass

    @abstractmethod
    def list_categories(self, type: Optional[TransactionType] = None) -> list[Category]:
        """List categories, optionally filtered by type."""
        pass

    # Tag operations
    @abstractmethod
    def create_tag(self, name: str, color: str, is_active: bool = True) -> int:
        """Create a new tag. Returns tag ID."""
        pass

    @abstractmethod
    def get_tag(self, tag_id: int) -> Optional[Tag]:
        """Get tag by ID."""
        pass

    @abstractmethod
    def find_tag(self, name: str) -> Optional[Tag]:
        """Find a tag by case-insensitive name."""
        pass

    @abstractmethod
    def list_tags(self, active_only: bool = False) -> list[Tag]:
        """List tags."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        unique_id: str,
        type: TransactionType,
        amount: Decimal,
        description: str,
        date: date,
        category_id: Optional[int] = None,
        account_id: Optional[int] = None,
        card_id: Optional[int] = None,
        tag_ids: Sequence[int] = (),
        notes: Optional[str] = None,
        installments_count: int = 1,
        installment_number: int = 1,
        parent_transaction_id: Optional[int] = None,
    ) -> int:
        """Create a new transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def get_transaction_by_unique_id(self, unique_id: str) -> Optional[Transaction]:
        """Get transaction by its unique ID."""
        pass

    @abstractmethod
    def transaction_exists(self, unique_id: str) -> bool:
        """Check if a transaction with the given unique ID exists."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        amount: Optional[Decimal] = None,
        type: Optional[TransactionType] = None,
        category_id: Optional[int] = None,
    ) -> None:
        """Update fields of a transaction. ``None`` leaves a field unchanged."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: Optional[int] = None,
        card_id: Optional[int] = None,
        parent_transaction_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, ordered by date then ID."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Get the number of transactions for an account."""
        pass
