"""Installment purchases.

A purchase split into N installments is stored as N expense transactions.
The first one is the parent; the others point at it through
``parent_transaction_id``, so the parent must be inserted (and its id known)
before any child. ``InstallmentService.create_purchase`` runs this as a
two-phase write with compensation: if a child insert fails, every row the
purchase already wrote is deleted again.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from fintrack.database.base import Database
from fintrack.domain.entities import Transaction, TransactionType
from fintrack.domain.errors import (
    NotFoundError,
    ReconciliationError,
    ValidationError,
    account_not_found,
    card_not_found,
    category_not_found,
    transaction_not_found,
)
from fintrack.utils.amount_parser import CENT, to_cents
from fintrack.utils.date_parser import to_date

logger = logging.getLogger(__name__)

MAX_INSTALLMENTS = 24


@dataclass(frozen=True)
class InstallmentDraft:
    """One installment before it is persisted."""

    description: str
    amount: Decimal
    date: date
    installment_number: int
    installments_count: int
    category_id: Optional[int] = None
    card_id: Optional[int] = None


@dataclass(frozen=True)
class PurchaseResult:
    """Outcome of an installment purchase.

    ``created`` is False when the purchase already existed and nothing was
    written.
    """

    parent_id: int
    installment_ids: tuple[int, ...]
    created: bool
    warnings: tuple[str, ...] = ()


def expand_installments(
    description: str,
    total_amount: Decimal | int | str,
    count: int,
    first_date: date | str,
    category_id: Optional[int] = None,
    card_id: Optional[int] = None,
) -> list[InstallmentDraft]:
    """Split a purchase into ``count`` monthly installments.

    Every installment gets ``total_amount / count`` rounded to cents; the last
    one is not adjusted for the rounding remainder. Installment ``i`` falls
    ``i`` calendar months after ``first_date``, clamped to the last day of
    shorter months (Jan 31 -> Feb 28).

    Args:
        description: Purchase description
        total_amount: Positive purchase total
        count: Number of installments (at least 1)
        first_date: Date of the first installment
        category_id: Category for every installment
        card_id: Card the purchase was made on

    Returns:
        Drafts ordered by installment number; the first is the parent

    Raises:
        ValidationError: If count, amount or date is invalid, or an installment
            would round to zero
    """
    if count < 1:
        raise ValidationError(f"Installment count must be at least 1, got {count}")
    total = Decimal(str(total_amount))
    if not total.is_finite() or total <= 0:
        raise ValidationError(f"Total amount must be positive, got {total_amount}")
    start = to_date(first_date)
    if start is None:
        raise ValidationError(f"Invalid first installment date: {first_date!r}")

    amount = to_cents(total / count)
    if amount < CENT:
        raise ValidationError(f"Installments of {total} over {count} months would be less than one cent each")
    return [
        InstallmentDraft(
            description=f"{description} ({i + 1}/{count})" if count > 1 else description,
            amount=amount,
            date=start + relativedelta(months=i),
            installment_number=i + 1,
            installments_count=count,
            category_id=category_id,
            card_id=card_id,
        )
        for i in range(count)
    ]


class InstallmentService:
    """Service for recording installment purchases."""

    def __init__(self, db: Database):
        """Initialize installment service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_purchase(
        self,
        description: str,
        total_amount: Decimal | int | str,
        count: int,
        first_date: date | str,
        card_id: Optional[int] = None,
        category_id: Optional[int] = None,
        account_id: Optional[int] = None,
        notes: Optional[str] = None,
        unique_id: Optional[str] = None,
    ) -> PurchaseResult:
        """Record an installment purchase.

        The parent installment is written first, then each child referencing
        it. Then the account balance is debited by the sum of the installments
        and the card's used amount is increased by the purchase total, once
        each. Submitting again with the same ``unique_id`` returns the stored
        purchase without writing anything; without an id every call is a new
        purchase.

        Args:
            description: Purchase description
            total_amount: Purchase total
            count: Number of installments (1-24)
            first_date: Date of the first installment
            card_id: Card charged with the purchase
            category_id: Expense category
            account_id: Account debited with the installments
            notes: Optional notes copied to every installment
            unique_id: Caller-supplied purchase identifier used to detect resubmissions

        Returns:
            PurchaseResult. An over-limit card is reported in ``warnings``, not rejected.

        Raises:
            ValidationError: If the purchase is invalid
            NotFoundError: If the card, category or account does not exist
            ReconciliationError: If an installment or a balance update fails; rows and
                balance changes already written are undone unless
                ``needs_manual_reconciliation`` is set
        """
        description = (description or "").strip()
        if not description:
            raise ValidationError("Description is required")
        if not 1 <= count <= MAX_INSTALLMENTS:
            raise ValidationError(f"Installment count must be between 1 and {MAX_INSTALLMENTS}, got {count}")

        drafts = expand_installments(description, total_amount, count, first_date, category_id, card_id)
        total = Decimal(str(total_amount))

        warnings = []
        if card_id is not None:
            card = self.db.get_card(card_id)
            if card is None:
                raise NotFoundError(card_not_found(card_id))
            if card.used_amount + total > card.credit_limit:
                warnings.append(
                    f"Purchase exceeds the available limit of card '{card.name}' "
                    f"({card.available_limit:.2f} available, {total:.2f} charged)"
                )
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        if account_id is not None and self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        key = unique_id or f"purchase:{uuid.uuid4().hex}"
        existing = self.db.get_transaction_by_unique_id(f"{key}#1") if unique_id else None
        if existing is not None:
            logger.info("Purchase %s already recorded as transaction %s", key, existing.id)
            children = self.db.list_transactions(parent_transaction_id=existing.id)
            return PurchaseResult(
                parent_id=existing.id,
                installment_ids=(existing.id,) + tuple(c.id for c in children),
                created=False,
            )

        for warning in warnings:
            logger.warning(warning)

        parent, children = drafts[0], drafts[1:]
        parent_id = self._insert(key, parent, account_id, notes, parent_id=None)

        charged = sum((d.amount for d in drafts), Decimal("0"))
        inserted: list[int] = []
        debited_account = None
        try:
            for draft in children:
                inserted.append(self._insert(key, draft, account_id, notes, parent_id=parent_id))
            if account_id is not None:
                self.db.adjust_account_balance(account_id, -charged)
                debited_account = account_id
            if card_id is not None:
                self.db.adjust_card_used_amount(card_id, total)
        except Exception as e:
            logger.error("Installment purchase %s failed after parent %s: %s", key, parent_id, e)
            refund = (debited_account, charged) if debited_account is not None else None
            self._compensate(parent_id, inserted, e, refund)

        logger.info("Recorded %d installment(s) of '%s' (parent %s)", count, description, parent_id)
        return PurchaseResult(
            parent_id=parent_id,
            installment_ids=(parent_id, *inserted),
            created=True,
            warnings=tuple(warnings),
        )

    def _insert(
        self,
        key: str,
        draft: InstallmentDraft,
        account_id: Optional[int],
        notes: Optional[str],
        parent_id: Optional[int],
    ) -> int:
        return self.db.create_transaction(
            unique_id=f"{key}#{draft.installment_number}",
            type=TransactionType.EXPENSE,
            amount=draft.amount,
            description=draft.description,
            date=draft.date,
            category_id=draft.category_id,
            account_id=account_id,
            card_id=draft.card_id,
            notes=notes,
            installments_count=draft.installments_count,
            installment_number=draft.installment_number,
            parent_transaction_id=parent_id,
        )

    def _compensate(
        self,
        parent_id: int,
        child_ids: list[int],
        cause: Exception,
        refund: Optional[tuple[int, Decimal]] = None,
    ) -> None:
        """Undo a failed purchase: credit back the account, delete rows newest first, then raise."""
        remaining = [parent_id, *child_ids]
        try:
            if refund is not None:
                account_id, amount = refund
                self.db.adjust_account_balance(account_id, amount)
            for transaction_id in reversed(child_ids):
                self.db.delete_transaction(transaction_id)
                remaining.remove(transaction_id)
            self.db.delete_transaction(parent_id)
            remaining.remove(parent_id)
        except Exception as cleanup_error:
            logger.critical(
                "Could not remove partial purchase (transactions %s): %s", remaining, cleanup_error
            )
            raise ReconciliationError(
                f"Installment purchase failed and cleanup did not complete; "
                f"transactions {remaining} need manual reconciliation: {cause}",
                parent_id=parent_id,
                orphan_ids=tuple(remaining),
                needs_manual_reconciliation=True,
            ) from cause

        raise ReconciliationError(
            f"Installment purchase failed and was rolled back: {cause}",
            parent_id=parent_id,
        ) from cause

    def list_installments(self, parent_id: int) -> list[Transaction]:
        """Return a purchase's installments, parent first."""
        parent = self.db.get_transaction(parent_id)
        if parent is None:
            raise NotFoundError(transaction_not_found(parent_id))
        return [parent] + self.db.list_transactions(parent_transaction_id=parent_id)
