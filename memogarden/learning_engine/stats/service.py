"""
Statistics store queries.

Counts are scoped to an account and optionally narrowed to one deck. Review
history keeps counting reviews of deleted cards, since those reviews did
happen. Everything forward-looking ignores deleted cards.

Local-day grouping is done in Python with pytz after a range-filtered
select, which keeps the queries portable across dialects.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from memogarden.learning_engine.config import PREDICTION_LIMIT, RETROSPECTION_LIMIT
from memogarden.learning_engine.constants import CardMaturity, CardState
from memogarden.learning_engine.stats.maturity import empty_histogram, maturity_expression
from memogarden.learning_engine.stats.windows import (
    DailyCount,
    future_window,
    local_date,
    past_window,
    start_of_local_date,
    to_sparse_daily_counts,
)
from memogarden.models import Account, Card, Deck, ReviewLog

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"


@dataclass(frozen=True)
class CardsRemaining:
    """Due cards by kind. ``learning`` covers Learning and Relearning."""

    new: int
    learning: int
    review: int


@dataclass(frozen=True)
class Statistics:
    cards: int
    reviews: int
    retrospection: list[DailyCount]
    prediction: list[DailyCount]
    maturities: dict[CardMaturity, int]


def _scope(stmt, account_id: UUID, deck_id: Optional[UUID]):
    stmt = stmt.where(Deck.account_id == account_id)
    if deck_id is not None:
        stmt = stmt.where(Deck.id == deck_id)
    return stmt


def count_cards(db: Session, account_id: UUID, deck_id: Optional[UUID] = None) -> int:
    """Number of active cards in the collection or in one deck."""
    stmt = (
        select(func.count(Card.id))
        .join(Deck, Deck.id == Card.deck_id)
        .where(Card.deleted_at.is_(None))
    )
    return db.execute(_scope(stmt, account_id, deck_id)).scalar_one()


def count_reviews(db: Session, account_id: UUID, deck_id: Optional[UUID] = None) -> int:
    """Number of reviews ever done, deleted cards included."""
    stmt = (
        select(func.count(ReviewLog.id))
        .join(Card, Card.id == ReviewLog.card_id)
        .join(Deck, Deck.id == Card.deck_id)
    )
    return db.execute(_scope(stmt, account_id, deck_id)).scalar_one()


def count_cards_by_maturity(
    db: Session, account_id: UUID, deck_id: Optional[UUID] = None
) -> dict[CardMaturity, int]:
    """Active cards per maturity stage, with a zero entry for every empty stage."""
    maturity = maturity_expression().label("maturity")
    stmt = (
        select(maturity, func.count(Card.id))
        .join(Deck, Deck.id == Card.deck_id)
        .where(Card.deleted_at.is_(None))
        .group_by(maturity)
    )
    histogram = empty_histogram()
    for value, count in db.execute(_scope(stmt, account_id, deck_id)):
        histogram[CardMaturity(value)] = count
    return histogram


def get_sparse_retrospection(
    db: Session,
    account_id: UUID,
    timezone: str,
    anchor: datetime,
    deck_id: Optional[UUID] = None,
    length: int = RETROSPECTION_LIMIT.value,
) -> dict[str, int]:
    """
    Review counts per local day for the ``length`` days ending with the anchor's day.

    Days without reviews are absent from the result.
    """
    first_day = local_date(anchor, timezone) - timedelta(days=length - 1)
    stmt = (
        select(ReviewLog.review)
        .join(Card, Card.id == ReviewLog.card_id)
        .join(Deck, Deck.id == Card.deck_id)
        .where(ReviewLog.review >= start_of_local_date(first_day, timezone))
    )
    reviews = db.execute(_scope(stmt, account_id, deck_id)).scalars()
    return to_sparse_daily_counts((local_date(review, timezone), 1) for review in reviews)


def get_sparse_prediction(
    db: Session,
    account_id: UUID,
    timezone: str,
    anchor: datetime,
    deck_id: Optional[UUID] = None,
    length: int = PREDICTION_LIMIT.value,
) -> dict[str, int]:
    """
    Due card counts per local day up to the end of the prediction window.

    Overdue cards are included under their original due day.
    """
    window_end = local_date(anchor, timezone) + timedelta(days=length)
    stmt = (
        select(Card.due)
        .join(Deck, Deck.id == Card.deck_id)
        .where(Card.deleted_at.is_(None), Card.due < start_of_local_date(window_end, timezone))
    )
    dues = db.execute(_scope(stmt, account_id, deck_id)).scalars()
    return to_sparse_daily_counts((local_date(due, timezone), 1) for due in dues)


def get_remaining(
    db: Session, account_id: UUID, anchor: datetime, deck_id: Optional[UUID] = None
) -> CardsRemaining:
    """Cards due at ``anchor``. Cards of deleted decks are not counted."""
    stmt = (
        select(Card.state, func.count(Card.id))
        .join(Deck, Deck.id == Card.deck_id)
        .where(
            Card.deleted_at.is_(None),
            Deck.deleted_at.is_(None),
            Card.due <= anchor,
        )
        .group_by(Card.state)
    )
    rows = db.execute(_scope(stmt, account_id, deck_id))
    counts = {CardState(state): count for state, count in rows}
    return CardsRemaining(
        new=counts.get(CardState.NEW, 0),
        learning=counts.get(CardState.LEARNING, 0) + counts.get(CardState.RELEARNING, 0),
        review=counts.get(CardState.REVIEW, 0),
    )


def get_statistics(
    db: Session,
    account: Account,
    now: datetime,
    deck_id: Optional[UUID] = None,
) -> Statistics:
    """
    Everything the statistics page shows, for the collection or one deck.

    Accounts without a timezone get UTC day boundaries.
    """
    timezone = account.timezone or DEFAULT_TIMEZONE
    retrospection = get_sparse_retrospection(db, account.id, timezone, now, deck_id)
    prediction = get_sparse_prediction(db, account.id, timezone, now, deck_id)
    logger.debug(
        f"Statistics for account {account.id}: {len(retrospection)} review days, "
        f"{len(prediction)} due days"
    )
    return Statistics(
        cards=count_cards(db, account.id, deck_id),
        reviews=count_reviews(db, account.id, deck_id),
        retrospection=past_window(timezone, now, retrospection),
        prediction=future_window(timezone, now, prediction),
        maturities=count_cards_by_maturity(db, account.id, deck_id),
    )
