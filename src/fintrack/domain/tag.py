"""Tag domain service."""

from typing import Optional
from fintrack.database.base import Database
from fintrack.domain.entities import Tag
from fintrack.domain.errors import ConflictError, ValidationError, duplicate_tag
from fintrack.utils.colors import random_color


class TagService:
    """Service for managing tags. Tag names are unique case-insensitively."""

    def __init__(self, db: Database):
        self.db = db

    def create_tag(self, name: str, color: Optional[str] = None) -> int:
        """Create an active tag.

        Raises:
            ValidationError: If name is empty
            ConflictError: If a tag with the same name exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Tag name is required")
        if self.db.find_tag(name) is not None:
            raise ConflictError(duplicate_tag(name))
        return self.db.create_tag(name=name, color=color or random_color(), is_active=True)

    def get_tag(self, tag_id: int) -> Optional[Tag]:
        return self.db.get_tag(tag_id)

    def find_tag(self, name: str) -> Optional[Tag]:
        return self.db.find_tag(name)

    def list_tags(self, active_only: bool = False) -> list[Tag]:
        return self.db.list_tags(active_only=active_only)
