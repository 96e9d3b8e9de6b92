"""Category domain service."""

from typing import Optional
from fintrack.database.base import Database
from fintrack.domain.entities import Category, TransactionType
from fintrack.domain.errors import ConflictError, ValidationError, duplicate_category
from fintrack.utils.colors import unique_random_color


class CategoryService:
    """Service for managing categories.

    Category names are unique per type partition, compared case-insensitively:
    an income "Outros" and an expense "Outros" are different categories.
    """

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self, name: str, type: TransactionType | str, color: Optional[str] = None
    ) -> int:
        """Create a category.

        Args:
            name: Category name
            type: Type partition the category belongs to
            color: Hex colour; a palette colour not yet used is picked when omitted

        Returns:
            Category ID

        Raises:
            ValidationError: If name is empty or type invalid
            ConflictError: If the name already exists in the partition
        """
        name = name.strip()
        if not name:
            raise ValidationError("Category name is required")
        try:
            category_type = TransactionType(type)
        except ValueError:
            raise ValidationError(f"Invalid category type: {type!r}")

        if self.db.find_category(name, category_type) is not None:
            raise ConflictError(duplicate_category(name, category_type.value))

        if color is None:
            color = unique_random_color(c.color for c in self.db.list_categories())
        return self.db.create_category(name=name, type=category_type, color=color)

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category(category_id)

    def find_category(self, name: str, type: Optional[TransactionType] = None) -> Optional[Category]:
        """Find a category by case-insensitive name."""
        return self.db.find_category(name, type)

    def list_categories(self, type: Optional[TransactionType] = None) -> list[Category]:
        """List categories, optionally restricted to one type partition."""
        return self.db.list_categories(type)
