"""Shared pytest fixtures for fintrack tests."""

import tempfile
import os
from decimal import Decimal
from pathlib import Path
import pytest

from fintrack.database.factories import create_sqlite_database
from fintrack.domain.account import AccountService
from fintrack.domain.card import CardService
from fintrack.domain.categorization import CategorizationEngine
from fintrack.domain.category import CategoryService
from fintrack.domain.entities import TransactionType
from fintrack.domain.import_service import ImportService
from fintrack.domain.installments import InstallmentService
from fintrack.domain.ledger import LedgerService
from fintrack.domain.tag import TagService


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep developer environment settings out of the tests."""
    for name in ("FINTRACK_DB_PATH", "FINTRACK_USER", "FINTRACK_LOG_LEVEL", "FINTRACK_KEYWORDS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def card_service(temp_db):
    """Create a CardService with a temporary database."""
    return CardService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def tag_service(temp_db):
    """Create a TagService with a temporary database."""
    return TagService(temp_db)


@pytest.fixture
def engine():
    """Categorization engine with the built-in keyword table."""
    return CategorizationEngine()


@pytest.fixture
def import_service(temp_db, engine):
    """Create an ImportService with a temporary database."""
    return ImportService(temp_db, engine)


@pytest.fixture
def installment_service(temp_db):
    """Create an InstallmentService with a temporary database."""
    return InstallmentService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account with a 1000.00 opening balance."""
    account_id = account_service.create_account(
        name="Test Account", bank_name="Test Bank", opening_balance=Decimal("1000.00")
    )
    return account_service.get_account(account_id)


@pytest.fixture
def sample_card(card_service):
    """Create a sample card with a 5000.00 limit."""
    card_id = card_service.create_card(name="Test Card", credit_limit=Decimal("5000.00"), closing_day=3, due_day=10)
    return card_service.get_card(card_id)


@pytest.fixture
def sample_categories(category_service):
    """Create a few categories and return their IDs by name."""
    return {
        "Alimentação": category_service.create_category("Alimentação", TransactionType.EXPENSE),
        "Viagem": category_service.create_category("Viagem", TransactionType.EXPENSE),
        "Salário": category_service.create_category("Salário", TransactionType.INCOME),
    }


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def xlsx_file(tmp_path):
    """Write a small statement spreadsheet and return its path."""
    from openpyxl import Workbook

    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["Data", "Descrição", "Valor", "Tipo", "Categoria", "Tags"])
    sheet.append(["15/09/2025", "Supermercado Extra", "R$ 1.234,56", "Despesa", "Alimentação", "casa, mensal"])
    sheet.append(["2025/09/16", "Salário Setembro", "5000,00", "Receita", "Salário", None])
    sheet.append(["2025-09-17", "Passagem aérea", "-800", None, "Viagem", "ferias"])
    sheet.append([None, "Linha sem data", "10,00", "Despesa", None, None])
    sheet.append(["18/09/2025", "Valor inválido", "abc", "Despesa", None, None])
    path = tmp_path / "extrato.xlsx"
    workbook.save(path)
    return path
