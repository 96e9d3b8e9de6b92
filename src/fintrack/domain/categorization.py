"""Keyword categorization engine with type correction."""

import json
import re
import unicodedata
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from fintrack.domain.entities import CategorizationResult, TransactionType
from fintrack.domain.errors import ValidationError
from fintrack.domain.keywords import (
    DEFAULT_EXPENSE_CATEGORY,
    DEFAULT_INCOME_CATEGORY,
    DEFAULT_KEYWORD_TABLE,
    DEFAULT_TYPE_SIGNALS,
)

DEFAULT_CONFIDENCE = 30
SHORT_KEYWORD_PENALTY = 15
TYPE_CORRECTION_PENALTY = 20
TYPE_CORRECTION_FLOOR = 50

_INCOME_HINTS = ("recebido", "deposito")
_EXPENSE_HINTS = ("pagamento", "debito", "saque")


def normalize_text(text: str) -> str:
    """Lower-case ``text`` and strip accents."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).strip()


def _word_pattern(phrase: str) -> re.Pattern:
    return re.compile(r"(?<!\w)" + re.escape(normalize_text(phrase)) + r"(?!\w)")


@dataclass(frozen=True)
class KeywordRule:
    """One keyword bound to a category and the type it implies."""

    keyword: str
    category: str
    implied_type: TransactionType
    confidence: int
    order: int
    pattern: re.Pattern

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class TypeSignal:
    """A phrase that reveals the direction of money movement."""

    phrase: str
    type: TransactionType
    order: int
    pattern: re.Pattern


def _as_type(value: Any) -> Optional[TransactionType]:
    if value is None or value == "":
        return None
    try:
        return TransactionType(str(getattr(value, "value", value)).lower())
    except ValueError:
        raise ValidationError(f"Invalid transaction type: {value!r}")


class CategorizationEngine:
    """Assigns categories from descriptions and flags mislabeled transaction types.

    The engine holds only its static tables and is safe to share between
    callers; construct it once and pass it to whoever needs it.
    """

    def __init__(
        self,
        keyword_table: Iterable[Sequence[Any]] = DEFAULT_KEYWORD_TABLE,
        type_signals: Iterable[Sequence[Any]] = DEFAULT_TYPE_SIGNALS,
        min_confidence: int = 70,
    ):
        """Initialize categorization engine.

        Args:
            keyword_table: Ordered (category, type, confidence, keywords) entries
            type_signals: Ordered (phrase, type) entries for type correction
            min_confidence: Confidence below which a suggestion is not applied
        """
        self.min_confidence = min_confidence
        self.rules: list[KeywordRule] = []
        self.category_types: dict[str, TransactionType] = {}

        for category, implied_type, confidence, keywords in keyword_table:
            category_type = TransactionType(implied_type)
            self.category_types.setdefault(category, category_type)
            for keyword in keywords:
                self.rules.append(
                    KeywordRule(
                        keyword=keyword,
                        category=category,
                        implied_type=category_type,
                        confidence=int(confidence),
                        order=len(self.rules),
                        pattern=_word_pattern(keyword),
                    )
                )

        self.signals = [
            TypeSignal(phrase=phrase, type=TransactionType(signal_type), order=i, pattern=_word_pattern(phrase))
            for i, (phrase, signal_type) in enumerate(type_signals)
        ]

    @classmethod
    def from_file(cls, path: str | Path, min_confidence: int = 70) -> "CategorizationEngine":
        """Build an engine from a JSON keyword file.

        The file holds ``{"categories": [{"name", "type", "confidence", "keywords"}],
        "type_signals": [{"phrase", "type"}]}``; a missing ``type_signals`` key
        keeps the default signals.

        Raises:
            ValidationError: If the file is not a valid keyword table
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
            table = [
                (entry["name"], entry["type"], entry.get("confidence", 90), entry["keywords"])
                for entry in data["categories"]
            ]
            signals = [(s["phrase"], s["type"]) for s in data.get("type_signals", [])] or DEFAULT_TYPE_SIGNALS
            return cls(keyword_table=table, type_signals=signals, min_confidence=min_confidence)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid keyword file '{path}': {e}")

    def category_type(self, category: str) -> Optional[TransactionType]:
        """Return the type partition a known category belongs to."""
        return self.category_types.get(category)

    def match_keyword(self, description: str) -> Optional[KeywordRule]:
        """Return the best keyword rule for ``description``.

        The longest matching keyword wins; ties go to the first rule defined.
        """
        text = normalize_text(description)
        if not text:
            return None
        best: Optional[KeywordRule] = None
        for rule in self.rules:
            if not rule.matches(text):
                continue
            if best is None or len(rule.keyword) > len(best.keyword):
                best = rule
        return best

    def infer_type(self, description: str) -> Optional[TypeSignal]:
        """Return the strongest directional signal found in ``description``."""
        text = normalize_text(description)
        best: Optional[TypeSignal] = None
        for signal in self.signals:
            if signal.pattern.search(text) is None:
                continue
            if best is None or len(signal.phrase) > len(best.phrase):
                best = signal
        return best

    def categorize(
        self,
        description: str,
        amount: Decimal | float | int,
        original_type: TransactionType | str | None,
        date: Any = None,
    ) -> CategorizationResult:
        """Categorize one transaction.

        Args:
            description: Transaction description
            amount: Transaction amount (sign is ignored)
            original_type: Type claimed by the source, if any
            date: Transaction date (informational)

        Returns:
            CategorizationResult. ``corrected_type`` is only a suggestion; the
            caller decides whether to apply it.
        """
        hint = _as_type(original_type)
        signal = self.infer_type(description)

        corrected_type = None
        reason = None
        if signal is not None and hint is not None and signal.type != hint:
            corrected_type = signal.type
            reason = f'"{signal.phrase}" indicates {signal.type.value} ({signal.type.label}), not {hint.value}'

        rule = self.match_keyword(description)
        effective_type = corrected_type or hint or (signal.type if signal else None)
        if effective_type is None:
            effective_type = rule.implied_type if rule else TransactionType.EXPENSE

        if rule is not None:
            category = rule.category
            confidence = rule.confidence
            if len(rule.keyword) <= 3:
                confidence -= SHORT_KEYWORD_PENALTY
            method = "keyword"
            matched_keyword = rule.keyword
        else:
            category = DEFAULT_INCOME_CATEGORY if effective_type is TransactionType.INCOME else DEFAULT_EXPENSE_CATEGORY
            confidence = DEFAULT_CONFIDENCE
            method = "default"
            matched_keyword = None

        if corrected_type is not None:
            confidence = max(TYPE_CORRECTION_FLOOR, confidence - TYPE_CORRECTION_PENALTY)

        warnings = self._validation_warnings(description, amount, category, effective_type)
        return CategorizationResult(
            category=category,
            confidence=max(0, min(100, confidence)),
            method=method,
            matched_keyword=matched_keyword,
            corrected_type=corrected_type,
            type_correction_reason=reason,
            validation_warnings=tuple(warnings),
        )

    def _validation_warnings(
        self,
        description: str,
        amount: Decimal | float | int,
        category: str,
        effective_type: TransactionType,
    ) -> list[str]:
        warnings = []
        try:
            if Decimal(str(amount)) == 0:
                warnings.append("Amount is zero")
        except ArithmeticError:
            warnings.append(f"Amount is not a number: {amount!r}")

        text = normalize_text(description)
        if len(text) < 3 or not re.search(r"[a-z]", text):
            warnings.append(f'Description "{description}" is too short or ambiguous to categorize reliably')

        category_type = self.category_type(category)
        if category_type is not None and category_type != effective_type:
            warnings.append(
                f'Category "{category}" is a {category_type.value} category but the transaction '
                f"is classified as {effective_type.value}"
            )
            if effective_type is TransactionType.INCOME and any(h in text for h in _INCOME_HINTS):
                warnings.append(
                    f'Transaction looks like income but was categorized as expense category "{category}"'
                )
            if effective_type is TransactionType.EXPENSE and any(h in text for h in _EXPENSE_HINTS):
                warnings.append(
                    f'Transaction looks like an expense but was categorized as income category "{category}"'
                )
        return warnings

    def categorize_batch(
        self, transactions: Iterable[dict[str, Any]]
    ) -> list[tuple[dict[str, Any], CategorizationResult]]:
        """Categorize a batch of ``{description, amount, type, date}`` dicts."""
        return [
            (
                txn,
                self.categorize(
                    txn.get("description", ""),
                    txn.get("amount", 0),
                    txn.get("type"),
                    txn.get("date"),
                ),
            )
            for txn in transactions
        ]

    @staticmethod
    def correction_report(
        results: Sequence[tuple[dict[str, Any], CategorizationResult]]
    ) -> dict[str, Any]:
        """Summarize the type corrections and warnings of a batch."""
        corrections = []
        warnings = 0
        total_confidence = 0
        for txn, result in results:
            total_confidence += result.confidence
            warnings += len(result.validation_warnings)
            if result.corrected_type is not None:
                corrections.append(
                    {
                        "description": txn.get("description", ""),
                        "original_type": str(getattr(txn.get("type"), "value", txn.get("type"))),
                        "corrected_type": result.corrected_type.value,
                        "reason": result.type_correction_reason,
                        "category": result.category,
                    }
                )
        return {
            "total_transactions": len(results),
            "type_corrections": len(corrections),
            "warnings": warnings,
            "average_confidence": total_confidence / len(results) if results else 0,
            "corrections": corrections,
        }
