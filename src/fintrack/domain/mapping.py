"""Category and tag mapping resolution for import sessions.

Imported files carry free-text category and tag labels. Before anything is
persisted each distinct label is resolved once into a ``map``, ``create`` or
``ignore`` decision; the user may flip ``create``/``ignore`` decisions and
only then are new categories and tags created.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from fintrack.database.base import Database
from fintrack.domain.entities import (
    Category,
    CategoryMapping,
    MappingAction,
    NormalizedRow,
    Tag,
    TagMapping,
    TransactionType,
)
from fintrack.domain.errors import NotFoundError, ValidationError
from fintrack.utils.colors import random_color, unique_random_color

logger = logging.getLogger(__name__)


def _key(name: str) -> str:
    return name.strip().casefold()


def resolve_mappings(
    rows: Iterable[NormalizedRow],
    existing_categories: Sequence[Category],
    existing_tags: Sequence[Tag],
    auto_create: bool = True,
) -> tuple[list[CategoryMapping], list[TagMapping]]:
    """Decide what to do with every distinct category and tag label in ``rows``.

    Categories are grouped by (case-insensitive name, type) because the same
    name may exist once per type partition; tags are grouped by name alone.
    Mappings come back in first-seen order, and the same inputs always yield
    the same actions.

    Args:
        rows: Normalized import rows
        existing_categories: The user's categories
        existing_tags: The user's tags
        auto_create: Whether unmatched labels default to ``create`` or ``ignore``

    Returns:
        Tuple of (category mappings, tag mappings)
    """
    category_index = {(_key(c.name), c.type): c.id for c in existing_categories}
    tag_index = {_key(t.name): t.id for t in existing_tags}
    unmatched = MappingAction.CREATE if auto_create else MappingAction.IGNORE

    categories: dict[tuple[str, TransactionType], CategoryMapping] = {}
    tags: dict[str, TagMapping] = {}

    for row in rows:
        if row.category and row.category.strip():
            key = (_key(row.category), row.type)
            mapping = categories.get(key)
            if mapping is None:
                existing_id = category_index.get(key)
                categories[key] = CategoryMapping(
                    xlsx_name=row.category.strip(),
                    type=row.type,
                    count=1,
                    action=MappingAction.MAP if existing_id is not None else unmatched,
                    resolved_category_id=existing_id,
                )
            else:
                mapping.count += 1

        for tag_name in row.tags:
            if not tag_name or not tag_name.strip():
                continue
            key = _key(tag_name)
            tag_mapping = tags.get(key)
            if tag_mapping is None:
                existing_id = tag_index.get(key)
                tags[key] = TagMapping(
                    xlsx_name=tag_name.strip(),
                    count=1,
                    action=MappingAction.MAP if existing_id is not None else unmatched,
                    resolved_tag_id=existing_id,
                )
            else:
                tag_mapping.count += 1

    return list(categories.values()), list(tags.values())


@dataclass
class MappingPlan:
    """The confirmation surface of one import session."""

    categories: list[CategoryMapping] = field(default_factory=list)
    tags: list[TagMapping] = field(default_factory=list)

    def category_mapping(self, name: str, type: TransactionType | str) -> CategoryMapping:
        """Return the mapping for a category label.

        Raises:
            NotFoundError: If the label was not in the import
        """
        wanted = (_key(name), TransactionType(type))
        for mapping in self.categories:
            if (_key(mapping.xlsx_name), mapping.type) == wanted:
                return mapping
        raise NotFoundError(f"No category mapping for '{name}' ({TransactionType(type).value})")

    def tag_mapping(self, name: str) -> TagMapping:
        """Return the mapping for a tag label.

        Raises:
            NotFoundError: If the label was not in the import
        """
        wanted = _key(name)
        for mapping in self.tags:
            if _key(mapping.xlsx_name) == wanted:
                return mapping
        raise NotFoundError(f"No tag mapping for '{name}'")

    def _lookup(self, name: str, type: Optional[TransactionType | str]) -> CategoryMapping | TagMapping:
        if type is None:
            return self.tag_mapping(name)
        return self.category_mapping(name, type)

    def set_action(
        self, name: str, action: MappingAction | str, type: Optional[TransactionType | str] = None
    ) -> None:
        """Set the action of a label. ``type`` selects a category; without it a tag.

        Raises:
            NotFoundError: If the label was not in the import
            ValidationError: If the label matches an existing entry, or ``map`` is requested
                for a label without one
        """
        mapping = self._lookup(name, type)
        action = MappingAction(action)
        if mapping.action is MappingAction.MAP:
            raise ValidationError(f"'{mapping.xlsx_name}' already maps to an existing entry")
        if action is MappingAction.MAP:
            raise ValidationError(f"'{mapping.xlsx_name}' has no existing entry to map to")
        mapping.action = action

    def flip(self, name: str, type: Optional[TransactionType | str] = None) -> MappingAction:
        """Toggle a label between ``create`` and ``ignore`` and return the new action."""
        mapping = self._lookup(name, type)
        new_action = MappingAction.IGNORE if mapping.action is MappingAction.CREATE else MappingAction.CREATE
        self.set_action(name, new_action, type)
        return new_action

    def pending_creations(self) -> tuple[list[CategoryMapping], list[TagMapping]]:
        """Return the labels that will create new entries when applied."""
        return (
            [m for m in self.categories if m.action is MappingAction.CREATE and m.resolved_category_id is None],
            [m for m in self.tags if m.action is MappingAction.CREATE and m.resolved_tag_id is None],
        )

    def category_id_for(self, name: Optional[str], type: TransactionType) -> Optional[int]:
        """Return the category ID a row label resolves to, or None when ignored or unresolved."""
        if not name or not name.strip():
            return None
        try:
            mapping = self.category_mapping(name, type)
        except NotFoundError:
            return None
        if mapping.action is MappingAction.IGNORE:
            return None
        return mapping.resolved_category_id

    def tag_ids_for(self, names: Iterable[str]) -> list[int]:
        """Return the tag IDs for a row's tag labels, keeping their order."""
        ids = []
        for name in names:
            if not name or not name.strip():
                continue
            try:
                mapping = self.tag_mapping(name)
            except NotFoundError:
                continue
            if mapping.action is not MappingAction.IGNORE and mapping.resolved_tag_id is not None:
                ids.append(mapping.resolved_tag_id)
        return ids


class MappingService:
    """Resolves mapping plans against the store and creates confirmed entries."""

    def __init__(self, db: Database):
        """Initialize mapping service.

        Args:
            db: Database instance
        """
        self.db = db

    def plan(self, rows: Sequence[NormalizedRow], auto_create: bool = True) -> MappingPlan:
        """Build the mapping plan of ``rows`` against the user's categories and tags."""
        categories, tags = resolve_mappings(rows, self.db.list_categories(), self.db.list_tags(), auto_create)
        logger.info(
            "Resolved %d category labels and %d tag labels (%d/%d to create)",
            len(categories),
            len(tags),
            sum(1 for m in categories if m.action is MappingAction.CREATE),
            sum(1 for m in tags if m.action is MappingAction.CREATE),
        )
        return MappingPlan(categories=categories, tags=tags)

    def apply(self, plan: MappingPlan) -> MappingPlan:
        """Create the categories and tags the plan marks ``create``.

        New categories get a palette colour not already used and the type
        partition of their rows; new tags get a random palette colour and are
        active. A label that appeared in the store since the plan was built is
        mapped instead of duplicated.

        Returns:
            The same plan with ``resolved_*_id`` filled in
        """
        new_categories, new_tags = plan.pending_creations()
        used_colors = [c.color for c in self.db.list_categories()]

        for mapping in new_categories:
            existing = self.db.find_category(mapping.xlsx_name, mapping.type)
            if existing is not None:
                mapping.resolved_category_id = existing.id
                continue
            color = unique_random_color(used_colors)
            used_colors.append(color)
            mapping.resolved_category_id = self.db.create_category(mapping.xlsx_name, mapping.type, color)
            logger.info("Created %s category '%s'", mapping.type.value, mapping.xlsx_name)

        for mapping in new_tags:
            existing_tag = self.db.find_tag(mapping.xlsx_name)
            if existing_tag is not None:
                mapping.resolved_tag_id = existing_tag.id
                continue
            mapping.resolved_tag_id = self.db.create_tag(mapping.xlsx_name, random_color(), is_active=True)
            logger.info("Created tag '%s'", mapping.xlsx_name)

        return plan
