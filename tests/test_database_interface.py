"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from fintrack.database.factories import create_database, create_sqlite_database
from fintrack.domain import entities
from fintrack.domain.entities import TransactionType
from fintrack.domain.errors import NotFoundError


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_account_returns_domain_model(self, temp_db):
        """Test that get_account returns a domain Account entity."""
        account_id = temp_db.create_account(name="Test Account", bank_name="Test Bank", opening_balance=Decimal("50"))

        account = temp_db.get_account(account_id)

        assert isinstance(account, entities.Account)
        assert account.id == account_id
        assert account.name == "Test Account"
        assert account.bank_name == "Test Bank"
        assert account.opening_balance == Decimal("50")
        assert account.balance == Decimal("50")
        assert isinstance(account.created_at, datetime)

    def test_get_category_returns_domain_model(self, temp_db):
        """Test that get_category returns a domain Category entity."""
        category_id = temp_db.create_category(name="Alimentação", type=TransactionType.EXPENSE, color="#3B82F6")

        category = temp_db.get_category(category_id)

        assert isinstance(category, entities.Category)
        assert category.type is TransactionType.EXPENSE
        assert category.color == "#3B82F6"

    def test_get_transaction_returns_domain_model(self, temp_db, sample_account):
        """Test that get_transaction returns a domain Transaction entity."""
        tag_a = temp_db.create_tag("a", "#10B981")
        tag_b = temp_db.create_tag("b", "#EF4444")
        txn_id = temp_db.create_transaction(
            unique_id="TXN001",
            type=TransactionType.EXPENSE,
            amount=Decimal("25.50"),
            description="Padaria",
            date=date(2025, 9, 15),
            account_id=sample_account.id,
            tag_ids=[tag_b, tag_a, tag_b],
        )

        txn = temp_db.get_transaction(txn_id)

        assert isinstance(txn, entities.Transaction)
        assert txn.unique_id == "TXN001"
        assert txn.type is TransactionType.EXPENSE
        assert txn.amount == Decimal("25.50")
        assert txn.date == date(2025, 9, 15)
        # Duplicate tag IDs collapse, order is kept
        assert [t.name for t in txn.tags] == ["b", "a"]
        assert temp_db.get_transaction_by_unique_id("TXN001").id == txn_id
        assert temp_db.transaction_exists("TXN001")
        assert not temp_db.transaction_exists("TXN002")

    def test_get_missing_entities_returns_none(self, temp_db):
        """Test that lookups of missing IDs return None."""
        assert temp_db.get_account(999) is None
        assert temp_db.get_card(999) is None
        assert temp_db.get_category(999) is None
        assert temp_db.get_tag(999) is None
        assert temp_db.get_transaction(999) is None

    def test_writes_to_missing_entities_raise(self, temp_db):
        """Test that updates of missing IDs raise NotFoundError."""
        with pytest.raises(NotFoundError):
            temp_db.adjust_account_balance(999, Decimal("1"))
        with pytest.raises(NotFoundError):
            temp_db.adjust_card_used_amount(999, Decimal("1"))
        with pytest.raises(NotFoundError):
            temp_db.delete_transaction(999)

    def test_find_is_case_insensitive(self, temp_db):
        """Test name lookups ignore case, including accented letters."""
        temp_db.create_category(name="Educação", type=TransactionType.EXPENSE, color="#3B82F6")
        temp_db.create_tag("Férias", "#10B981")

        assert temp_db.find_category("EDUCAÇÃO", TransactionType.EXPENSE).name == "Educação"
        assert temp_db.find_category("educação", TransactionType.INCOME) is None
        assert temp_db.find_category("educação").name == "Educação"
        assert temp_db.find_tag("FÉRIAS").name == "Férias"

    def test_category_name_unique_per_type(self, temp_db):
        """The same category name may exist once per type."""
        temp_db.create_category(name="Reembolso", type=TransactionType.EXPENSE, color="#3B82F6")
        temp_db.create_category(name="Reembolso", type=TransactionType.INCOME, color="#EF4444")

        assert len(temp_db.list_categories()) == 2
        assert len(temp_db.list_categories(TransactionType.INCOME)) == 1
        with pytest.raises(IntegrityError):
            temp_db.create_category(name="Reembolso", type=TransactionType.INCOME, color="#10B981")

    def test_duplicate_unique_id_rejected(self, temp_db):
        """Test that a second transaction with the same unique_id fails and the session recovers."""
        fields = dict(type=TransactionType.INCOME, amount=Decimal("1"), description="x", date=date(2025, 1, 1))
        temp_db.create_transaction(unique_id="dup", **fields)

        with pytest.raises(IntegrityError):
            temp_db.create_transaction(unique_id="dup", **fields)

        temp_db.create_transaction(unique_id="other", **fields)
        assert len(temp_db.list_transactions()) == 2

    def test_list_transactions_filters(self, temp_db, sample_account):
        """Test date range and account filters."""
        for day in (1, 15, 30):
            temp_db.create_transaction(
                unique_id=f"t{day}",
                type=TransactionType.EXPENSE,
                amount=Decimal("1"),
                description=f"Dia {day}",
                date=date(2025, 9, day),
                account_id=sample_account.id,
            )
        temp_db.create_transaction(
            unique_id="other", type=TransactionType.EXPENSE, amount=Decimal("1"), description="x", date=date(2025, 9, 2)
        )

        in_range = temp_db.list_transactions(start_date=date(2025, 9, 1), end_date=date(2025, 9, 15))
        assert [t.unique_id for t in in_range] == ["t1", "other", "t15"]
        assert len(temp_db.list_transactions(account_id=sample_account.id)) == 3
        assert temp_db.get_account_transaction_count(sample_account.id) == 3


class TestAtomicWrites:
    """Tests for grouped writes."""

    def test_atomic_commits_together(self, temp_db, sample_account):
        """Test that a block's writes are all stored."""
        with temp_db.atomic():
            temp_db.create_transaction(
                unique_id="a", type=TransactionType.INCOME, amount=Decimal("10"), description="a",
                date=date(2025, 9, 1), account_id=sample_account.id,
            )
            temp_db.adjust_account_balance(sample_account.id, Decimal("10"))

        assert temp_db.transaction_exists("a")
        assert temp_db.get_account(sample_account.id).balance == Decimal("1010.00")

    def test_atomic_rolls_back_on_error(self, temp_db, sample_account):
        """Test that a failure inside a block discards all of its writes."""
        with pytest.raises(NotFoundError):
            with temp_db.atomic():
                temp_db.create_transaction(
                    unique_id="a", type=TransactionType.INCOME, amount=Decimal("10"), description="a",
                    date=date(2025, 9, 1), account_id=sample_account.id,
                )
                temp_db.adjust_account_balance(999, Decimal("10"))

        assert not temp_db.transaction_exists("a")
        assert temp_db.get_account(sample_account.id).balance == Decimal("1000.00")


class TestUserScoping:
    """Every row belongs to one user."""

    def test_users_do_not_see_each_other(self, temp_db):
        """Test that a second user on the same file sees none of the first user's data."""
        account_id = temp_db.create_account(name="Conta", bank_name="Banco")
        temp_db.create_category(name="Mercado", type=TransactionType.EXPENSE, color="#3B82F6")
        temp_db.create_transaction(
            unique_id="shared-id", type=TransactionType.EXPENSE, amount=Decimal("5"), description="x",
            date=date(2025, 9, 1), account_id=account_id,
        )

        other = create_sqlite_database(database_path=temp_db.database_path, user_id="someone-else")
        try:
            assert other.list_accounts() == []
            assert other.get_account(account_id) is None
            assert other.find_category("Mercado") is None
            assert not other.transaction_exists("shared-id")

            # Names and unique IDs only need to be unique per user
            other.create_account(name="Conta", bank_name="Banco")
            other.create_transaction(
                unique_id="shared-id", type=TransactionType.EXPENSE, amount=Decimal("5"), description="x",
                date=date(2025, 9, 1),
            )
        finally:
            other.disconnect()

        assert len(temp_db.list_accounts()) == 1
        assert len(temp_db.list_transactions()) == 1


def test_create_database_from_url():
    """Test creating a database from a SQLAlchemy URL."""
    db = create_database("sqlite:///:memory:", user_id="tester")
    try:
        account_id = db.create_account(name="Memória", bank_name="Banco")
        assert db.get_account(account_id).name == "Memória"
        assert db.user_id == "tester"
    finally:
        db.disconnect()


def test_user_from_environment(monkeypatch, tmp_path):
    """Test that FINTRACK_USER selects the user."""
    monkeypatch.setenv("FINTRACK_USER", "env-user")
    db = create_sqlite_database(database_path=str(tmp_path / "env.db"))
    assert db.user_id == "env-user"
