"""Deck endpoints."""

from uuid import UUID

from fastapi import APIRouter, Response, status

from memogarden.core.dependencies import CurrentAccount, DbSession, get_owned_deck
from memogarden.learning_engine.health.service import remove_deck

router = APIRouter()


@router.delete("/{account_id}/decks/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_deck(deck_id: UUID, account: CurrentAccount, db: DbSession):
    """Soft-delete a deck with all its cards."""
    deck = get_owned_deck(db, account, deck_id)
    remove_deck(db, deck.id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
