"""Tests for installment purchases."""

from datetime import date
from decimal import Decimal

import pytest

from fintrack.domain.entities import TransactionType
from fintrack.domain.errors import NotFoundError, ReconciliationError, ValidationError
from fintrack.domain.installments import MAX_INSTALLMENTS, expand_installments


def test_expand_three_installments():
    """Test a 1200 purchase in three monthly installments."""
    drafts = expand_installments("Notebook", Decimal("1200"), 3, "2025-01-10")

    assert [d.date for d in drafts] == [date(2025, 1, 10), date(2025, 2, 10), date(2025, 3, 10)]
    assert [d.amount for d in drafts] == [Decimal("400.00")] * 3
    assert [d.description for d in drafts] == ["Notebook (1/3)", "Notebook (2/3)", "Notebook (3/3)"]
    assert [d.installment_number for d in drafts] == [1, 2, 3]


def test_expand_single_installment_keeps_description():
    """A single installment has no suffix."""
    (draft,) = expand_installments("Geladeira", 2500, 1, date(2025, 5, 2))
    assert draft.description == "Geladeira"
    assert draft.amount == Decimal("2500.00")


def test_expand_clamps_month_end():
    """Test that dates past the end of a short month are clamped."""
    drafts = expand_installments("Curso", 300, 4, date(2025, 1, 31))
    assert [d.date for d in drafts] == [
        date(2025, 1, 31),
        date(2025, 2, 28),
        date(2025, 3, 31),
        date(2025, 4, 30),
    ]


def test_expand_rejects_installments_below_one_cent():
    """Test that a total too small to split is rejected instead of stored as zeros."""
    with pytest.raises(ValidationError):
        expand_installments("Chiclete", Decimal("0.10"), 24, date(2025, 1, 10))

    drafts = expand_installments("Chiclete", Decimal("0.24"), 24, date(2025, 1, 10))
    assert all(d.amount == Decimal("0.01") for d in drafts)


def test_expand_rounding_stays_within_a_cent_per_installment():
    """Rounded installments sum to the total within one cent each."""
    drafts = expand_installments("Sofá", Decimal("100"), 3, "2025-03-01")
    assert [d.amount for d in drafts] == [Decimal("33.33")] * 3
    assert abs(sum(d.amount for d in drafts) - Decimal("100")) <= Decimal("0.01") * 3


@pytest.mark.parametrize(
    "total, count, first_date",
    [(100, 0, "2025-01-01"), (0, 2, "2025-01-01"), (-50, 2, "2025-01-01"), (100, 2, "31/02/2025")],
)
def test_expand_rejects_invalid_input(total, count, first_date):
    """Test that invalid count, amount or date raise ValidationError."""
    with pytest.raises(ValidationError):
        expand_installments("Compra", total, count, first_date)


def test_create_purchase_on_card(installment_service, card_service, sample_card, temp_db):
    """Test that a purchase writes a parent, its children and one card increment."""
    result = installment_service.create_purchase(
        "Notebook", Decimal("1200"), 3, "2025-01-10", card_id=sample_card.id
    )

    assert result.created
    assert result.warnings == ()
    assert len(result.installment_ids) == 3

    installments = installment_service.list_installments(result.parent_id)
    assert [t.id for t in installments] == list(result.installment_ids)
    assert [t.description for t in installments] == ["Notebook (1/3)", "Notebook (2/3)", "Notebook (3/3)"]
    assert all(t.type is TransactionType.EXPENSE for t in installments)
    assert all(t.amount == Decimal("400.00") for t in installments)
    assert all(t.installments_count == 3 for t in installments)

    # Exactly one installment has no parent
    parents = [t for t in installments if t.parent_transaction_id is None]
    assert [t.id for t in parents] == [result.parent_id]
    assert all(t.parent_transaction_id == result.parent_id for t in installments[1:])

    card = card_service.get_card(sample_card.id)
    assert card.used_amount == Decimal("1200.00")


def test_resubmitting_purchase_id_is_idempotent(installment_service, card_service, sample_card, temp_db):
    """The same purchase id submitted twice is stored and charged once."""
    first = installment_service.create_purchase(
        "TV", Decimal("3000"), 10, "2025-02-05", card_id=sample_card.id, unique_id="pedido-7"
    )
    second = installment_service.create_purchase(
        "TV", Decimal("3000"), 10, "2025-02-05", card_id=sample_card.id, unique_id="pedido-7"
    )

    assert not second.created
    assert second.parent_id == first.parent_id
    assert second.installment_ids == first.installment_ids
    assert len(temp_db.list_transactions()) == 10
    assert card_service.get_card(sample_card.id).used_amount == Decimal("3000.00")


def test_identical_purchases_without_id_are_both_recorded(installment_service, card_service, sample_card, temp_db):
    """Two real purchases with the same details are two purchases."""
    first = installment_service.create_purchase("Pizza", 60, 2, "2025-03-01", card_id=sample_card.id)
    second = installment_service.create_purchase("Pizza", 60, 2, "2025-03-01", card_id=sample_card.id)

    assert first.created and second.created
    assert first.parent_id != second.parent_id
    assert len(temp_db.list_transactions()) == 4
    assert card_service.get_card(sample_card.id).used_amount == Decimal("120.00")


def test_caller_supplied_id(installment_service, temp_db):
    """Test that an explicit purchase id controls idempotency."""
    first = installment_service.create_purchase("Bike", 900, 3, "2025-06-01", unique_id="order-42")
    second = installment_service.create_purchase("Bike", 900, 3, "2025-06-01", unique_id="order-43")

    assert first.created and second.created
    assert temp_db.get_transaction(first.parent_id).unique_id == "order-42#1"
    assert len(temp_db.list_transactions()) == 6


def test_create_purchase_validation(installment_service):
    """Test the purchase-level validation rules."""
    with pytest.raises(ValidationError):
        installment_service.create_purchase("Compra", 100, MAX_INSTALLMENTS + 1, "2025-01-01")
    with pytest.raises(ValidationError):
        installment_service.create_purchase("Compra", 0, 2, "2025-01-01")
    with pytest.raises(ValidationError):
        installment_service.create_purchase("   ", 100, 2, "2025-01-01")
    with pytest.raises(NotFoundError):
        installment_service.create_purchase("Compra", 100, 2, "2025-01-01", card_id=999)
    with pytest.raises(NotFoundError):
        installment_service.create_purchase("Compra", 100, 2, "2025-01-01", category_id=999)


def test_over_limit_is_a_warning(installment_service, card_service, sample_card):
    """Test that exceeding the card limit is reported, not rejected."""
    result = installment_service.create_purchase("Viagem", Decimal("6000"), 6, "2025-07-01", card_id=sample_card.id)

    assert result.created
    assert len(result.warnings) == 1
    assert "Test Card" in result.warnings[0]
    card = card_service.get_card(sample_card.id)
    assert card.is_over_limit


def _fail_on_call(monkeypatch, db, method, call_number):
    """Make ``db.<method>`` raise on its ``call_number``-th call."""
    original = getattr(db, method)
    calls = {"count": 0}

    def failing(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == call_number:
            raise RuntimeError(f"{method} failed")
        return original(*args, **kwargs)

    monkeypatch.setattr(db, method, failing)


def test_failed_child_insert_is_compensated(monkeypatch, installment_service, card_service, sample_card, temp_db):
    """A failing child removes the whole purchase and leaves the card alone."""
    _fail_on_call(monkeypatch, temp_db, "create_transaction", 3)

    with pytest.raises(ReconciliationError) as excinfo:
        installment_service.create_purchase("Geladeira", Decimal("2400"), 4, "2025-01-15", card_id=sample_card.id)

    assert not excinfo.value.needs_manual_reconciliation
    assert excinfo.value.orphan_ids == ()
    assert temp_db.list_transactions() == []
    assert card_service.get_card(sample_card.id).used_amount == Decimal("0.00")


def test_failed_card_update_is_compensated(monkeypatch, installment_service, sample_card, temp_db):
    """Test that a failing card increment also removes the installments."""
    _fail_on_call(monkeypatch, temp_db, "adjust_card_used_amount", 1)

    with pytest.raises(ReconciliationError):
        installment_service.create_purchase("Fone", 300, 3, "2025-01-15", card_id=sample_card.id)

    assert temp_db.list_transactions() == []


def test_failed_cleanup_needs_manual_reconciliation(monkeypatch, installment_service, temp_db):
    """Test that orphaned rows are reported when compensation fails."""
    _fail_on_call(monkeypatch, temp_db, "create_transaction", 3)
    _fail_on_call(monkeypatch, temp_db, "delete_transaction", 1)

    with pytest.raises(ReconciliationError) as excinfo:
        installment_service.create_purchase("Cama", 1000, 4, "2025-01-15")

    error = excinfo.value
    assert error.needs_manual_reconciliation
    stored = {t.id for t in temp_db.list_transactions()}
    assert set(error.orphan_ids) == stored
    assert error.parent_id in error.orphan_ids
    assert len(stored) == 2


def test_purchase_on_account_debits_balance(installment_service, account_service, ledger_service, sample_account):
    """Test that installments charged to an account keep its balance reconciled."""
    result = installment_service.create_purchase("TV", Decimal("1200"), 3, "2025-01-10", account_id=sample_account.id)

    assert result.created
    assert account_service.get_account(sample_account.id).balance == Decimal("-200.00")
    check = ledger_service.reconcile_account(sample_account.id)
    assert check.is_consistent
    assert check.expected_balance == Decimal("-200.00")


def test_failed_card_update_refunds_account(
    monkeypatch, installment_service, account_service, sample_account, sample_card, temp_db
):
    """Test that compensation credits back an account already debited."""
    _fail_on_call(monkeypatch, temp_db, "adjust_card_used_amount", 1)

    with pytest.raises(ReconciliationError) as excinfo:
        installment_service.create_purchase(
            "Fone", 300, 3, "2025-01-15", card_id=sample_card.id, account_id=sample_account.id
        )

    assert not excinfo.value.needs_manual_reconciliation
    assert temp_db.list_transactions() == []
    assert account_service.get_account(sample_account.id).balance == Decimal("1000.00")
