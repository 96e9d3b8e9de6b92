"""Mapper functions to convert SQLAlchemy models into domain entities."""

from decimal import Decimal

from fintrack.domain import entities as domain
from fintrack.database.models import (
    Account as ORMAccount,
    Card as ORMCard,
    Category as ORMCategory,
    Tag as ORMTag,
    Transaction as ORMTransaction,
)


def _decimal(value) -> Decimal:
    return Decimal(value) if value is not None else Decimal("0")


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        bank_name=orm_account.bank_name,
        opening_balance=_decimal(orm_account.opening_balance),
        balance=_decimal(orm_account.balance),
        created_at=orm_account.created_at,
    )


def card_to_domain(orm_card: ORMCard) -> domain.Card:
    """Convert SQLAlchemy Card model to domain Card entity."""
    return domain.Card(
        id=orm_card.id,
        name=orm_card.name,
        credit_limit=_decimal(orm_card.credit_limit),
        used_amount=_decimal(orm_card.used_amount),
        closing_day=orm_card.closing_day,
        due_day=orm_card.due_day,
        created_at=orm_card.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        type=domain.TransactionType(orm_category.type),
        color=orm_category.color,
        created_at=orm_category.created_at,
    )


def tag_to_domain(orm_tag: ORMTag) -> domain.Tag:
    """Convert SQLAlchemy Tag model to domain Tag entity."""
    return domain.Tag(
        id=orm_tag.id,
        name=orm_tag.name,
        color=orm_tag.color,
        is_active=orm_tag.is_active,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        unique_id=orm_transaction.unique_id,
        type=domain.TransactionType(orm_transaction.type),
        amount=_decimal(orm_transaction.amount),
        description=orm_transaction.description,
        date=orm_transaction.date,
        category_id=orm_transaction.category_id,
        account_id=orm_transaction.account_id,
        card_id=orm_transaction.card_id,
        tags=tuple(tag_to_domain(link.tag) for link in orm_transaction.tag_links),
        notes=orm_transaction.notes,
        installments_count=orm_transaction.installments_count,
        installment_number=orm_transaction.installment_number,
        parent_transaction_id=orm_transaction.parent_transaction_id,
        imported_at=orm_transaction.imported_at,
    )
