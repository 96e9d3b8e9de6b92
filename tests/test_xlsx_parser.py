"""Tests for spreadsheet parsing."""

from datetime import date
from decimal import Decimal

import pytest

from fintrack.domain.entities import TransactionType
from fintrack.domain.errors import ParseError
from fintrack.parsers.normalize import normalize_rows
from fintrack.parsers.xlsx import detect_columns, parse_xlsx, parse_xlsx_rows


def test_detect_columns_synonyms():
    """Test header synonyms in Portuguese and English."""
    columns = detect_columns(["Data", "Descrição", "Valor (R$)", "Tipo", "Categoria", "Etiquetas"])
    assert columns == {"date": 0, "description": 1, "amount": 2, "type": 3, "category": 4, "tags": 5}

    columns = detect_columns(["Transaction Date", "Memo", "Amount"])
    assert columns == {"date": 0, "description": 1, "amount": 2}


def test_detect_columns_first_match_wins():
    """Test that the first header matching a role is used."""
    columns = detect_columns(["Data", "Data de Vencimento", "Descrição", "Valor"])
    assert columns["date"] == 0


def test_parse_rows_skips_incomplete_rows():
    """Rows missing a field or with a bad amount are skipped; the rest are kept."""
    headers = ["Data", "Descrição", "Valor"]
    rows = [
        ("15/09/2025", "Padaria", "12,50"),
        ("16/09/2025", None, "10,00"),
        ("17/09/2025", "Sem valor", ""),
        ("18/09/2025", "Zero", "0,00"),
        ("19/09/2025", "Mercado", "-99,90"),
        (None, None, None),
    ]

    parsed = parse_xlsx_rows(headers, rows)

    assert [r.description for r in parsed] == ["Padaria", "Mercado"]
    assert [r.row_number for r in parsed] == [2, 6]
    assert parsed[1].amount == Decimal("-99.90")


def test_parse_workbook(xlsx_file):
    """Test parsing and normalizing a real workbook."""
    parsed = parse_xlsx(xlsx_file.read_bytes())
    rows, errors = normalize_rows(parsed)

    assert errors == []
    assert len(rows) == 3

    market, salary, ticket = rows
    assert market.date == date(2025, 9, 15)
    assert market.amount == Decimal("1234.56")
    assert market.type is TransactionType.EXPENSE
    assert market.category == "Alimentação"
    assert market.tags == ("casa", "mensal")

    assert salary.date == date(2025, 9, 16)
    assert salary.type is TransactionType.INCOME

    # No type column value: the negative amount decides
    assert ticket.type is TransactionType.EXPENSE
    assert ticket.amount == Decimal("800")


def test_parse_invalid_workbook():
    """Test that bytes that are not a workbook raise ParseError."""
    with pytest.raises(ParseError):
        parse_xlsx(b"definitely not a zip file")
