"""
Store client for the health cache.

Every recompute is a single set-based UPDATE, so the cost of a sync does not
grow with round trips as collections grow. Soft-deleted cards and decks are
filtered in every statement.

Statements run without ORM session synchronization. Instead the written
column is expired on every loaded instance of the model, so the next read
of any card, deck or account in the same unit of work comes from the store.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from memogarden.learning_engine.constants import CardState
from memogarden.learning_engine.srs.decay import retrievability_expression
from memogarden.models import Account, Card, Deck

logger = logging.getLogger(__name__)


def active_account_decks(account_id: UUID):
    """Ids of the account's decks that are not deleted."""
    return select(Deck.id).where(Deck.account_id == account_id, Deck.deleted_at.is_(None))


class HealthStore:
    """Set-based reads and writes of the card, deck and account retrievability columns."""

    def __init__(self, db: Session):
        self.db = db

    def _execute(self, stmt, model, column: str) -> int:
        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        # Callers flush before recomputing, so no pending change is discarded here
        for obj in list(self.db.identity_map.values()):
            if isinstance(obj, model):
                self.db.expire(obj, [column])
        return result.rowcount

    def recompute_card_health(self, account_id: UUID, anchor: datetime) -> int:
        """Recompute decay for every reviewed active card of the account. Returns the row count."""
        stmt = (
            update(Card)
            .where(
                Card.deck_id.in_(active_account_decks(account_id)),
                Card.deleted_at.is_(None),
                Card.state != CardState.NEW,
                Card.last_review.is_not(None),
            )
            .values(retrievability=retrievability_expression(anchor))
        )
        rowcount = self._execute(stmt, Card, "retrievability")
        logger.debug(f"Recomputed retrievability of {rowcount} cards for account {account_id}")
        return rowcount

    def recompute_deck_health(self, deck_id: UUID) -> None:
        mean = (
            select(func.avg(Card.retrievability))
            .where(Card.deck_id == deck_id, Card.deleted_at.is_(None))
            .scalar_subquery()
        )
        stmt = (
            update(Deck)
            .where(Deck.id == deck_id, Deck.deleted_at.is_(None))
            .values(retrievability=mean)
        )
        self._execute(stmt, Deck, "retrievability")

    def recompute_decks_health(self, account_id: UUID) -> int:
        """Roll up every active deck of the account in one statement. Returns the row count."""
        mean = (
            select(func.avg(Card.retrievability))
            .where(Card.deck_id == Deck.id, Card.deleted_at.is_(None))
            .scalar_subquery()
        )
        stmt = (
            update(Deck)
            .where(Deck.account_id == account_id, Deck.deleted_at.is_(None))
            .values(retrievability=mean)
        )
        rowcount = self._execute(stmt, Deck, "retrievability")
        logger.debug(f"Recomputed retrievability of {rowcount} decks for account {account_id}")
        return rowcount

    def recompute_account_health(self, account_id: UUID) -> None:
        # Mean over cards directly, so large decks weigh more than small ones
        mean = (
            select(func.avg(Card.retrievability))
            .where(
                Card.deck_id.in_(active_account_decks(account_id)),
                Card.deleted_at.is_(None),
            )
            .scalar_subquery()
        )
        stmt = update(Account).where(Account.id == account_id).values(retrievability=mean)
        self._execute(stmt, Account, "retrievability")

    def soft_delete_deck(self, deck_id: UUID, now: datetime) -> int:
        """Mark a deck and its active cards deleted. Returns the number of cards deleted."""
        cards = self._execute(
            update(Card)
            .where(Card.deck_id == deck_id, Card.deleted_at.is_(None))
            .values(deleted_at=now),
            Card,
            "deleted_at",
        )
        self._execute(
            update(Deck)
            .where(Deck.id == deck_id, Deck.deleted_at.is_(None))
            .values(deleted_at=now),
            Deck,
            "deleted_at",
        )
        return cards
