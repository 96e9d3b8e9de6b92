"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ParseError(DomainError):
    """Source file could not be decoded at all (not a single bad row)."""


class WorkerBusyError(DomainError):
    """A parse job was submitted while the worker was still running one."""


class ReconciliationError(DomainError):
    """A multi-step ledger write failed part-way through.

    Attributes:
        parent_id: ID of the parent transaction that was inserted, if any
        orphan_ids: IDs still present in the store after compensation
        needs_manual_reconciliation: True when compensation did not complete
    """

    def __init__(
        self,
        message: str,
        parent_id: Optional[int] = None,
        orphan_ids: tuple[int, ...] = (),
        needs_manual_reconciliation: bool = False,
    ):
        super().__init__(message)
        self.parent_id = parent_id
        self.orphan_ids = orphan_ids
        self.needs_manual_reconciliation = needs_manual_reconciliation


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def card_not_found(card_id: int) -> str:
    """Return message for missing card."""
    return f"Card {card_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def tag_not_found(tag_id: int) -> str:
    """Return message for missing tag by ID."""
    return f"Tag {tag_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def duplicate_transaction_unique_id(unique_id: str) -> str:
    """Return message for duplicate transaction unique ID."""
    return f"Transaction with unique_id '{unique_id}' already exists"


def duplicate_category(name: str, category_type: str) -> str:
    """Return message for a category name already used in a type partition."""
    return f"Category '{name}' already exists for type '{category_type}'"


def duplicate_tag(name: str) -> str:
    """Return message for a tag name already in use."""
    return f"Tag '{name}' already exists"


def account_delete_blocked(account_id: int, transaction_count: int) -> str:
    """Return message when account has dependent transactions."""
    return (
        f"Cannot delete account {account_id}: it has "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}. "
        "Please reassign or delete them first."
    )
