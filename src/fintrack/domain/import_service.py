"""Import pipeline: parsed rows to persisted transactions.

``prepare`` normalizes and categorizes rows and resolves their category and
tag labels into a ``MappingPlan``. Nothing is written until ``commit``, so a
caller can show the plan and the suggested type corrections first.
"""

import hashlib
import logging
import re
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional, Sequence

from fintrack.database.base import Database
from fintrack.domain.categorization import CategorizationEngine
from fintrack.domain.entities import (
    CategorizationResult,
    MappingAction,
    NormalizedRow,
    ParsedRow,
    TransactionType,
)
from fintrack.domain.errors import DomainError, NotFoundError, ValidationError, account_not_found
from fintrack.domain.ledger import signed_amount
from fintrack.domain.mapping import MappingPlan, MappingService, resolve_mappings
from fintrack.parsers.normalize import normalize_rows
from fintrack.utils.amount_parser import parse_amount, to_cents
from fintrack.utils.date_parser import to_date

logger = logging.getLogger(__name__)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def transaction_key(row: NormalizedRow, account_id: int, occurrence: int = 0) -> str:
    """Derive the unique_id of an imported row.

    Rows with a bank-provided id (OFX FITID) use it; other rows are keyed by
    their content plus how many identical rows preceded them in the same
    file, so re-importing a file yields the same keys.
    """
    if row.external_id:
        return f"ext:{account_id}:{row.external_id}"
    content = (
        f"{account_id}|{row.date.isoformat()}|{row.type.value}|{row.amount:.2f}|"
        f"{row.description.casefold()}|{occurrence}"
    )
    return "row:" + hashlib.sha1(content.encode("utf-8")).hexdigest()[:20]


@dataclass
class ImportSession:
    """Rows of one import awaiting confirmation."""

    rows: list[NormalizedRow]
    results: list[CategorizationResult]
    plan: MappingPlan
    errors: list[str] = field(default_factory=list)
    auto_create: bool = True
    min_confidence: int = 70

    def corrections(self) -> list[tuple[int, NormalizedRow, CategorizationResult]]:
        """Return the rows whose type the engine suggests changing."""
        return [
            (i, row, result)
            for i, (row, result) in enumerate(zip(self.rows, self.results))
            if result.corrected_type is not None and result.corrected_type != row.type
        ]

    def warnings(self) -> list[tuple[int, str]]:
        """Return (row index, message) for every validation warning."""
        return [(i, w) for i, result in enumerate(self.results) for w in result.validation_warnings]

    def suggested_category(self, index: int) -> Optional[str]:
        """Return the category a row will be filed under, if any.

        A label from the source file wins; otherwise the engine's keyword
        match is used when its confidence reaches ``min_confidence``.
        """
        row = self.rows[index]
        if row.category:
            return row.category
        result = self.results[index]
        if result.method == "keyword" and result.confidence >= self.min_confidence:
            return result.category
        return None

    def accept_type_corrections(self, indices: Optional[Iterable[int]] = None) -> list[int]:
        """Apply suggested type corrections.

        Args:
            indices: Rows whose correction is accepted; None accepts all of them

        Returns:
            Indices of the rows that changed type
        """
        wanted = None if indices is None else set(indices)
        changed = []
        for i, row, result in self.corrections():
            if wanted is not None and i not in wanted:
                continue
            self.rows[i] = replace(row, type=result.corrected_type)
            changed.append(i)
        if changed:
            logger.info("Accepted %d type correction(s)", len(changed))
        return changed


@dataclass
class ImportResult:
    """Counts of one committed import."""

    imported: int = 0
    duplicates: int = 0
    errors: list[str] = field(default_factory=list)
    imported_ids: list[int] = field(default_factory=list)

    @property
    def account_updated(self) -> bool:
        return self.imported > 0


class ImportService:
    """Service that turns parsed rows into stored transactions."""

    def __init__(self, db: Database, engine: Optional[CategorizationEngine] = None):
        """Initialize import service.

        Args:
            db: Database instance
            engine: Categorization engine; a default-table engine when omitted
        """
        self.db = db
        self.engine = engine or CategorizationEngine()
        self.mapping_service = MappingService(db)

    def prepare(self, rows: Sequence[ParsedRow | NormalizedRow], auto_create: bool = True) -> ImportSession:
        """Normalize, categorize and map rows without writing anything.

        Args:
            rows: Parser output, or rows already normalized (e.g. by the worker)
            auto_create: Whether unknown labels default to being created

        Returns:
            ImportSession to confirm and commit
        """
        parsed = [r for r in rows if isinstance(r, ParsedRow)]
        normalized = [r for r in rows if isinstance(r, NormalizedRow)]
        normalized_parsed, errors = normalize_rows(parsed)
        normalized.extend(normalized_parsed)

        results = [self.engine.categorize(r.description, r.amount, r.type, r.date) for r in normalized]
        session = ImportSession(
            rows=normalized,
            results=results,
            plan=MappingPlan(),
            errors=errors,
            auto_create=auto_create,
            min_confidence=self.engine.min_confidence,
        )
        self.refresh_plan(session)
        logger.info(
            "Prepared %d row(s) for import, %d rejected, %d type correction(s) suggested",
            len(normalized),
            len(errors),
            len(session.corrections()),
        )
        return session

    def _labelled_rows(self, session: ImportSession) -> list[NormalizedRow]:
        return [replace(row, category=session.suggested_category(i)) for i, row in enumerate(session.rows)]

    def refresh_plan(self, session: ImportSession) -> MappingPlan:
        """Rebuild the mapping plan after rows changed type.

        Decisions the user already made for a label carry over.
        """
        previous = session.plan
        categories, tags = resolve_mappings(
            self._labelled_rows(session),
            self.db.list_categories(),
            self.db.list_tags(),
            session.auto_create,
        )
        for mapping in categories:
            try:
                old = previous.category_mapping(mapping.xlsx_name, mapping.type)
            except NotFoundError:
                continue
            if mapping.action is not MappingAction.MAP and old.action is not MappingAction.MAP:
                mapping.action = old.action
        for tag_mapping in tags:
            try:
                old_tag = previous.tag_mapping(tag_mapping.xlsx_name)
            except NotFoundError:
                continue
            if tag_mapping.action is not MappingAction.MAP and old_tag.action is not MappingAction.MAP:
                tag_mapping.action = old_tag.action
        session.plan = MappingPlan(categories=categories, tags=tags)
        return session.plan

    def commit(self, session: ImportSession, account_id: int) -> ImportResult:
        """Create the planned categories and tags and store the rows.

        Each row is inserted together with its balance change, so a row is
        either fully applied or not at all. Rows already stored are counted as
        duplicates and leave the balance untouched.

        Args:
            session: Prepared import session
            account_id: Account receiving the transactions

        Returns:
            ImportResult with imported, duplicate and error counts

        Raises:
            NotFoundError: If account not found
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        self.refresh_plan(session)
        plan = self.mapping_service.apply(session.plan)
        result = ImportResult(errors=list(session.errors))
        seen: Counter = Counter()

        for index, row in enumerate(session.rows):
            content = (row.date, row.type, row.amount, row.description.casefold())
            unique_id = transaction_key(row, account_id, seen[content])
            seen[content] += 1

            if self.db.transaction_exists(unique_id):
                logger.debug("Row %d already imported as %s", index + 1, unique_id)
                result.duplicates += 1
                continue

            with self.db.atomic():
                transaction_id = self.db.create_transaction(
                    unique_id=unique_id,
                    type=row.type,
                    amount=row.amount,
                    description=row.description,
                    date=row.date,
                    category_id=plan.category_id_for(session.suggested_category(index), row.type),
                    account_id=account_id,
                    tag_ids=plan.tag_ids_for(row.tags),
                )
                self.db.adjust_account_balance(account_id, signed_amount(row))
            result.imported += 1
            result.imported_ids.append(transaction_id)

        logger.info(
            "Import into account %s: %d imported, %d duplicates, %d errors",
            account_id,
            result.imported,
            result.duplicates,
            len(result.errors),
        )
        return result

    def import_request(self, payload: Any) -> dict[str, Any]:
        """Handle an external import request.

        The request is ``{"account_id", "transactions": [{"date", "description",
        "amount", "type", "category"?, "tags"?}]}``. Rows are validated one by
        one; invalid rows end up in ``details.errors`` while the rest are
        imported. Unknown category and tag names are dropped silently.

        Returns:
            ``{"success", "summary": {"total", "imported", "errors", "duplicates"},
            "details": {"imported_ids", "errors", "account_updated"}}``, or
            ``{"success": False, "error"}`` when the request itself is unusable
        """
        try:
            account_id, items = self._request_target(payload)
        except DomainError as e:
            logger.error("Import request rejected: %s", e)
            return {"success": False, "error": str(e)}

        response: dict[str, Any] = {
            "success": True,
            "summary": {"total": len(items), "imported": 0, "errors": 0, "duplicates": 0},
            "details": {"imported_ids": [], "errors": [], "account_updated": False},
        }
        seen: Counter = Counter()

        for index, item in enumerate(items):
            try:
                row = self._validate_request_row(item)
                content = (row.date, row.type, row.amount, row.description.casefold())
                unique_id = transaction_key(row, account_id, seen[content])
                seen[content] += 1
                if self.db.transaction_exists(unique_id):
                    response["summary"]["duplicates"] += 1
                    continue

                category = self.db.find_category(row.category, row.type) if row.category else None
                if row.category and category is None:
                    category = self.db.find_category(row.category)
                    if category is not None:
                        logger.warning(
                            "Row %d: category '%s' belongs to the %s partition but the transaction is %s",
                            index + 1,
                            category.name,
                            category.type.value,
                            row.type.value,
                        )
                if row.category and category is None:
                    logger.info("Category '%s' not found; row %d imported without category", row.category, index + 1)
                tag_ids = [tag.id for tag in (self.db.find_tag(name) for name in row.tags) if tag is not None]

                with self.db.atomic():
                    transaction_id = self.db.create_transaction(
                        unique_id=unique_id,
                        type=row.type,
                        amount=row.amount,
                        description=row.description,
                        date=row.date,
                        category_id=category.id if category else None,
                        account_id=account_id,
                        tag_ids=tag_ids,
                    )
                    self.db.adjust_account_balance(account_id, signed_amount(row))
            except Exception as e:
                logger.warning(
                    "Import request row %d failed: %s", index + 1, e, exc_info=not isinstance(e, DomainError)
                )
                response["summary"]["errors"] += 1
                response["details"]["errors"].append({"index": index, "transaction": item, "error": str(e)})
                continue

            response["summary"]["imported"] += 1
            response["details"]["imported_ids"].append(str(transaction_id))

        response["details"]["account_updated"] = response["summary"]["imported"] > 0
        logger.info(
            "Import request complete: %d/%d imported, %d errors, %d duplicates",
            response["summary"]["imported"],
            response["summary"]["total"],
            response["summary"]["errors"],
            response["summary"]["duplicates"],
        )
        return response

    def _request_target(self, payload: Any) -> tuple[int, list[Any]]:
        if not isinstance(payload, dict) or not payload.get("account_id") or not isinstance(
            payload.get("transactions"), list
        ):
            raise ValidationError(
                "Invalid request body. Expected: { account_id: string, transactions: Transaction[] }"
            )
        try:
            account_id = int(payload["account_id"])
        except (TypeError, ValueError):
            raise NotFoundError("Account not found or does not belong to user")
        if self.db.get_account(account_id) is None:
            raise NotFoundError("Account not found or does not belong to user")
        return account_id, payload["transactions"]

    @staticmethod
    def _validate_request_row(item: Any) -> NormalizedRow:
        if not isinstance(item, dict):
            raise ValidationError("Transaction must be an object")
        if not item.get("date") or not item.get("description") or item.get("amount") is None or not item.get("type"):
            raise ValidationError("Missing required fields: date, description, amount, type")

        txn_date = to_date(item["date"]) if _ISO_DATE_RE.match(str(item["date"])) else None
        if txn_date is None:
            raise ValidationError("Invalid date format. Expected: YYYY-MM-DD")

        if item["type"] not in (TransactionType.INCOME.value, TransactionType.EXPENSE.value):
            raise ValidationError('Invalid type. Expected: "income" or "expense"')

        amount = parse_amount(item["amount"])
        if amount.is_finite():
            amount = to_cents(amount)
        if not amount.is_finite() or amount <= 0:
            raise ValidationError("Amount must be a positive number")

        tags = item.get("tags") or ()
        if isinstance(tags, str):
            tags = tags.split(",")
        category = item.get("category")
        return NormalizedRow(
            date=txn_date,
            description=" ".join(str(item["description"]).split()),
            amount=amount,
            type=TransactionType(item["type"]),
            category=str(category).strip() if category else None,
            tags=tuple(str(t).strip() for t in tags if str(t).strip()),
        )
