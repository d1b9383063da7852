"""Database models."""

from memogarden.models.account import Account
from memogarden.models.card import Card, ReviewLog
from memogarden.models.deck import Deck

__all__ = [
    "Account",
    "Deck",
    "Card",
    "ReviewLog",
]
