"""Utility functions for fintrack."""

from fintrack.utils.date_parser import normalize_date, parse_date, to_date
from fintrack.utils.amount_parser import NOT_A_NUMBER, is_valid_amount, parse_amount, to_cents

__all__ = [
    "normalize_date",
    "parse_date",
    "to_date",
    "NOT_A_NUMBER",
    "is_valid_amount",
    "parse_amount",
    "to_cents",
]
