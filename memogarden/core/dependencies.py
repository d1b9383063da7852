"""FastAPI dependencies for account scoping and engine collaborators."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from memogarden.core.app_exceptions import not_found
from memogarden.db.session import get_db
from memogarden.learning_engine.health.service import (
    get_active_card,
    get_active_deck,
    get_memory_model,
)
from memogarden.learning_engine.srs.fsrs_adapter import MemoryModel
from memogarden.models import Account, Card, Deck

DbSession = Annotated[Session, Depends(get_db)]
Model = Annotated[MemoryModel, Depends(get_memory_model)]


def get_account(account_id: UUID, db: DbSession) -> Account:
    """Account from the path, 404 if it does not exist."""
    account = db.get(Account, account_id)
    if account is None:
        raise not_found("Account", account_id)
    return account


CurrentAccount = Annotated[Account, Depends(get_account)]


def get_owned_deck(db: Session, account: Account, deck_id: UUID) -> Deck:
    """Active deck of the account, 404 otherwise."""
    deck = get_active_deck(db, deck_id)
    if deck is None or deck.account_id != account.id:
        raise not_found("Deck", deck_id)
    return deck


def get_owned_card(db: Session, account: Account, card_id: UUID) -> Card:
    """Active card in one of the account's decks, 404 otherwise."""
    card = get_active_card(db, card_id)
    if card is None or card.deck.account_id != account.id:
        raise not_found("Card", card_id)
    return card
