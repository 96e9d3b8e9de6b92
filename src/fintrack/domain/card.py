"""Credit card domain service."""

from decimal import Decimal
from typing import Optional
from fintrack.database.base import Database
from fintrack.domain.entities import Card
from fintrack.domain.errors import NotFoundError, ValidationError, card_not_found


class CardService:
    """Service for managing credit cards."""

    def __init__(self, db: Database):
        self.db = db

    def create_card(self, name: str, credit_limit: Decimal, closing_day: int, due_day: int) -> int:
        """Create a credit card.

        Raises:
            ValidationError: If the name is empty, the limit negative or a day outside 1-31
        """
        name = name.strip()
        if not name:
            raise ValidationError("Card name is required")
        if Decimal(credit_limit) < 0:
            raise ValidationError("Credit limit cannot be negative")
        for label, day in (("Closing", closing_day), ("Due", due_day)):
            if not 1 <= day <= 31:
                raise ValidationError(f"{label} day must be between 1 and 31, got {day}")
        return self.db.create_card(
            name=name, credit_limit=Decimal(credit_limit), closing_day=closing_day, due_day=due_day
        )

    def get_card(self, card_id: int) -> Optional[Card]:
        return self.db.get_card(card_id)

    def require_card(self, card_id: int) -> Card:
        """Get card by ID, raising NotFoundError when it does not exist."""
        card = self.db.get_card(card_id)
        if card is None:
            raise NotFoundError(card_not_found(card_id))
        return card

    def list_cards(self) -> list[Card]:
        return self.db.list_cards()
