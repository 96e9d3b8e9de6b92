"""Tests for the keyword categorization engine."""

import json
from decimal import Decimal

import pytest

from fintrack.domain.categorization import CategorizationEngine, normalize_text
from fintrack.domain.entities import TransactionType
from fintrack.domain.errors import ValidationError


def test_normalize_text():
    """Test lower-casing and accent stripping."""
    assert normalize_text("  Pagamento de SALÁRIO ") == "pagamento de salario"
    assert normalize_text("") == ""


def test_pix_received_marked_expense_is_corrected(engine):
    """A received PIX labeled as expense gets an income correction."""
    result = engine.categorize("PIX recebido de João Silva", Decimal("150.00"), "expense")

    assert result.corrected_type is TransactionType.INCOME
    assert result.type_correction_reason
    assert "pix recebido" in result.type_correction_reason
    assert result.category == "Transferências"
    # Corrected results lose confidence but keep a floor
    assert 50 <= result.confidence < 95


def test_correction_is_only_a_suggestion(engine):
    """Matching types produce no correction."""
    result = engine.categorize("PIX recebido de João Silva", 150, TransactionType.INCOME)
    assert result.corrected_type is None
    assert result.type_correction_reason is None
    assert result.confidence == 95


def test_longest_phrase_decides_direction(engine):
    """Test that the longest signal beats the shorter ones it contains."""
    result = engine.categorize("Pagamento de salario ACME", 5000, "expense")
    assert result.corrected_type is TransactionType.INCOME
    assert result.category == "Salário"

    card = engine.categorize("Compra no cartão - Supermercado Extra", 89.9, "income")
    assert card.corrected_type is TransactionType.EXPENSE
    assert card.category == "Alimentação"


def test_longest_keyword_wins(engine):
    """Test that the longest matching keyword picks the category."""
    result = engine.categorize("Mercado Livre pedido 123", 120, "expense")
    assert result.category == "Compras"
    assert result.matched_keyword == "mercado livre"


def test_keywords_match_whole_words(engine):
    """A keyword inside another word does not match."""
    assert engine.match_keyword("Supermercado Extra").keyword == "supermercado"
    assert engine.match_keyword("Tedious meeting") is None


def test_tie_goes_to_first_rule():
    """Test that equally long keywords resolve to the first rule defined."""
    engine = CategorizationEngine(
        keyword_table=[
            ("Primeira", "expense", 90, ("abcd",)),
            ("Segunda", "expense", 90, ("wxyz",)),
        ],
        type_signals=[],
    )
    assert engine.categorize("wxyz abcd", 10, "expense").category == "Primeira"


def test_short_keyword_penalty(engine):
    """Keywords of three characters or fewer lose confidence."""
    result = engine.categorize("Pix para Maria", 30, None)
    assert result.matched_keyword == "pix"
    assert result.confidence == 95 - 15
    assert result.method == "keyword"


def test_default_categories(engine):
    """Test the fallback categories per type."""
    expense = engine.categorize("Xyzzy qwerty", 10, "expense")
    assert expense.category == "Outros"
    assert expense.method == "default"
    assert expense.confidence == 30

    income = engine.categorize("Xyzzy qwerty", 10, "income")
    assert income.category == "Outras Receitas"


def test_validation_warnings(engine):
    """Test zero amount, ambiguous description and type mismatch warnings."""
    assert "Amount is zero" in engine.categorize("Supermercado", 0, "expense").validation_warnings

    short = engine.categorize("ab", 10, "expense")
    assert any("too short" in w for w in short.validation_warnings)

    mismatch = engine.categorize("Restaurante Central", 80, "income")
    assert mismatch.category == "Alimentação"
    assert any('"Alimentação" is a expense category' in w for w in mismatch.validation_warnings)


def test_invalid_type_rejected(engine):
    """Test that an unknown type raises ValidationError."""
    with pytest.raises(ValidationError):
        engine.categorize("Supermercado", 10, "transfer")


def test_engine_is_stateless(engine):
    """Repeated calls give identical results."""
    first = engine.categorize("Uber viagem centro", 23.4, "expense")
    engine.categorize("PIX recebido", 10, "expense")
    assert engine.categorize("Uber viagem centro", 23.4, "expense") == first


def test_from_file(tmp_path):
    """Test loading a keyword table from JSON."""
    path = tmp_path / "keywords.json"
    path.write_text(
        json.dumps({"categories": [{"name": "Pets", "type": "expense", "keywords": ["petshop", "veterinario"]}]}),
        encoding="utf-8",
    )

    engine = CategorizationEngine.from_file(path)
    result = engine.categorize("Petshop Amigo", 60, "expense")

    assert result.category == "Pets"
    assert result.confidence == 90
    # Default signals are kept when the file has none
    assert engine.categorize("Veterinário pagamento recebido", 60, "expense").corrected_type is TransactionType.INCOME


def test_from_file_invalid(tmp_path):
    """Test that a malformed keyword file raises ValidationError."""
    path = tmp_path / "keywords.json"
    path.write_text('{"categories": [{"name": "Pets"}]}', encoding="utf-8")
    with pytest.raises(ValidationError):
        CategorizationEngine.from_file(path)
    with pytest.raises(ValidationError):
        CategorizationEngine.from_file(tmp_path / "missing.json")


def test_correction_report(engine):
    """Test the batch correction summary."""
    results = engine.categorize_batch(
        [
            {"description": "PIX recebido de João", "amount": 150, "type": "expense"},
            {"description": "Supermercado Extra", "amount": 10, "type": "expense"},
        ]
    )

    report = CategorizationEngine.correction_report(results)

    assert report["total_transactions"] == 2
    assert report["type_corrections"] == 1
    correction = report["corrections"][0]
    assert correction["original_type"] == "expense"
    assert correction["corrected_type"] == "income"
    assert correction["description"] == "PIX recebido de João"
