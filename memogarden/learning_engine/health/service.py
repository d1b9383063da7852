"""
Health synchronizer - keeps the card/deck/account retrievability cache consistent.

Two entry points:
- Eager: every card mutation (review, create, edit, remove) resyncs the
  aggregates it affects before returning, so writes never leave the cache
  stale.
- Lazy: maybe_sync_user_health() runs a full resync at most once per local
  calendar day per account, on ordinary read access. Only the passage of time
  makes the cache stale, and by at most one day.

All functions flush but never commit. The caller owns the transaction.
"""

import logging
from datetime import UTC, datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from memogarden.learning_engine.config import (
    HEALTH_SYNC_ANCHOR_HOUR,
    RETRIEVABILITY_AFTER_REVIEW,
)
from memogarden.learning_engine.constants import CardState, ReviewRating
from memogarden.learning_engine.exceptions import MemoryModelError
from memogarden.learning_engine.health.store import HealthStore
from memogarden.learning_engine.srs.fsrs_adapter import (
    CardMemoryState,
    MemoryModel,
    validate_state,
)
from memogarden.learning_engine.stats.windows import local_time_of_day, start_of_day
from memogarden.models import Account, Card, Deck, ReviewLog

logger = logging.getLogger(__name__)

_default_memory_model: Optional[MemoryModel] = None


def get_memory_model() -> MemoryModel:
    """Process-wide memory model, built on first use."""
    global _default_memory_model
    if _default_memory_model is None:
        _default_memory_model = MemoryModel()
    return _default_memory_model


def _utcnow() -> datetime:
    return datetime.now(UTC)


# =============================================================================
# Force sync
# =============================================================================


def force_sync_cards_health(db: Session, account_id: UUID, anchor: datetime) -> int:
    """
    Recompute retrievability of every reviewed active card of an account as of ``anchor``.

    Idempotent for a fixed anchor. Never-reviewed cards keep a NULL value.

    Returns:
        Number of cards recomputed
    """
    return HealthStore(db).recompute_card_health(account_id, anchor)


def force_sync_deck_health(db: Session, deck_id: UUID) -> None:
    """Recompute a deck's retrievability as the mean over its active cards."""
    HealthStore(db).recompute_deck_health(deck_id)


def force_sync_decks_health(db: Session, account_id: UUID) -> int:
    """Recompute the retrievability of every active deck of an account."""
    return HealthStore(db).recompute_decks_health(account_id)


def force_sync_account_health(db: Session, account_id: UUID) -> None:
    """Recompute an account's retrievability as the mean over all its active cards."""
    HealthStore(db).recompute_account_health(account_id)


def _sync_deck_and_account(db: Session, deck_id: UUID, account_id: UUID) -> None:
    force_sync_deck_health(db, deck_id)
    force_sync_account_health(db, account_id)


# =============================================================================
# Lookups
# =============================================================================


def get_active_card(db: Session, card_id: UUID) -> Optional[Card]:
    """Card by id, or None if it does not exist or is deleted."""
    card = db.get(Card, card_id)
    if card is None or card.deleted_at is not None:
        return None
    return card


def get_active_deck(db: Session, deck_id: UUID) -> Optional[Deck]:
    """Deck by id, or None if it does not exist or is deleted."""
    deck = db.get(Deck, deck_id)
    if deck is None or deck.deleted_at is not None:
        return None
    return deck


def get_next_card(db: Session, deck_id: UUID, anchor: datetime) -> Optional[Card]:
    """Earliest due active card of a deck at ``anchor``, oldest card first on ties."""
    return db.execute(
        select(Card)
        .where(Card.deck_id == deck_id, Card.deleted_at.is_(None), Card.due <= anchor)
        .order_by(Card.due, Card.created_at)
        .limit(1)
    ).scalar_one_or_none()


def memory_state(card: Card) -> CardMemoryState:
    return CardMemoryState(
        stability=card.stability,
        difficulty=card.difficulty,
        elapsed_days=card.elapsed_days,
        scheduled_days=card.scheduled_days,
        reps=card.reps,
        lapses=card.lapses,
        state=CardState(card.state),
        due=card.due,
        last_review=card.last_review,
        step=card.step,
    )


def _apply_memory_state(card: Card, state: CardMemoryState) -> None:
    card.stability = state.stability
    card.difficulty = state.difficulty
    card.elapsed_days = state.elapsed_days
    card.scheduled_days = state.scheduled_days
    card.reps = state.reps
    card.lapses = state.lapses
    card.state = int(state.state)
    card.due = state.due
    card.last_review = state.last_review
    card.step = state.step


# =============================================================================
# Eager sync on card mutations
# =============================================================================


def review_card(
    db: Session,
    card_id: UUID,
    rating: ReviewRating,
    answer: str = "",
    now: Optional[datetime] = None,
    due_cutoff: Optional[datetime] = None,
    memory_model: Optional[MemoryModel] = None,
) -> Optional[ReviewLog]:
    """
    Review a card and resync its deck and account.

    Reviewing ahead of schedule is not allowed: a card with ``due`` after
    ``due_cutoff`` (``now`` by default) is left alone. The memory model runs
    before anything is written, so a rejected review has no effect.

    Args:
        db: Database session
        card_id: Card ID
        rating: Self-assessed recall quality
        answer: The user's attempt at the back of the card, may be empty
        now: Review instant
        due_cutoff: Latest due date still accepted for review
        memory_model: Scheduler override

    Returns:
        The appended review log, or None if the card is missing or not due

    Raises:
        MemoryModelError: If the memory model fails or returns an invalid state
    """
    now = now or _utcnow()
    due_cutoff = due_cutoff or now
    memory_model = memory_model or get_memory_model()

    card = get_active_card(db, card_id)
    if card is None:
        logger.info(f"Review skipped: card {card_id} not found")
        return None
    if card.due > due_cutoff:
        logger.info(f"Review skipped: card {card_id} not due until {card.due.isoformat()}")
        return None

    try:
        new_state, entry = memory_model.next(memory_state(card), ReviewRating(rating), now)
        validate_state(new_state, now)
    except MemoryModelError as e:
        e.card_id = card_id
        logger.warning(f"Review of card {card_id} rejected by the memory model: {e.message}")
        raise

    _apply_memory_state(card, new_state)
    card.retrievability = RETRIEVABILITY_AFTER_REVIEW.value
    review_log = ReviewLog(
        card_id=card.id,
        answer_attempt=answer,
        rating=int(entry.rating),
        state=int(entry.state),
        due=entry.due,
        stability=entry.stability,
        difficulty=entry.difficulty,
        elapsed_days=entry.elapsed_days,
        last_elapsed_days=entry.last_elapsed_days,
        scheduled_days=entry.scheduled_days,
        review=entry.review,
    )
    db.add(review_log)
    db.flush()

    _sync_deck_and_account(db, card.deck_id, card.deck.account_id)

    logger.info(
        f"Reviewed card {card_id}: rating={entry.rating.name}, state={entry.state.name}, "
        f"due={entry.due.isoformat()}"
    )
    return review_log


def create_card(
    db: Session,
    deck_id: UUID,
    front: str,
    back: str,
    now: Optional[datetime] = None,
) -> Optional[Card]:
    """
    Create a New card, due immediately, and resync its deck and account.

    Returns:
        The card, or None if the deck is missing or deleted
    """
    now = now or _utcnow()
    deck = get_active_deck(db, deck_id)
    if deck is None:
        return None

    state = CardMemoryState.initial(now)
    card = Card(deck_id=deck.id, front=front, back=back, created_at=now, updated_at=now)
    _apply_memory_state(card, state)
    db.add(card)
    db.flush()

    _sync_deck_and_account(db, deck.id, deck.account_id)
    logger.info(f"Created card {card.id} in deck {deck.id}")
    return card


def edit_card(
    db: Session,
    card_id: UUID,
    front: Optional[str] = None,
    back: Optional[str] = None,
    deck_id: Optional[UUID] = None,
    now: Optional[datetime] = None,
) -> Optional[Card]:
    """
    Edit a card's content and optionally move it to another deck.

    A move resyncs both the source and the destination deck. The account
    aggregate does not depend on deck membership and is left as is.

    Returns:
        The card, or None if the card or the destination deck is missing
    """
    now = now or _utcnow()
    card = get_active_card(db, card_id)
    if card is None:
        return None

    source_deck_id = card.deck_id
    if deck_id is not None and deck_id != source_deck_id:
        if get_active_deck(db, deck_id) is None:
            return None
        card.deck_id = deck_id
    if front is not None:
        card.front = front
    if back is not None:
        card.back = back
    card.updated_at = now
    db.flush()

    if card.deck_id != source_deck_id:
        force_sync_deck_health(db, source_deck_id)
        force_sync_deck_health(db, card.deck_id)
        logger.info(f"Moved card {card_id} from deck {source_deck_id} to deck {card.deck_id}")
    return card


def remove_card(db: Session, card_id: UUID, now: Optional[datetime] = None) -> Optional[Card]:
    """
    Soft-delete a card and resync its deck and account.

    Review logs of the card are kept.

    Returns:
        The deleted card, or None if it was missing or already deleted
    """
    now = now or _utcnow()
    card = get_active_card(db, card_id)
    if card is None:
        return None

    card.deleted_at = now
    db.flush()

    _sync_deck_and_account(db, card.deck_id, card.deck.account_id)
    logger.info(f"Removed card {card_id}")
    return card


def remove_deck(db: Session, deck_id: UUID, now: Optional[datetime] = None) -> Optional[Deck]:
    """
    Soft-delete a deck with all its active cards and resync the account.

    Returns:
        The deleted deck, or None if it was missing or already deleted
    """
    now = now or _utcnow()
    deck = get_active_deck(db, deck_id)
    if deck is None:
        return None

    removed = HealthStore(db).soft_delete_deck(deck.id, now)
    force_sync_account_health(db, deck.account_id)
    logger.info(f"Removed deck {deck_id} with {removed} cards")
    return deck


# =============================================================================
# Lazy sync
# =============================================================================


def maybe_sync_user_health(
    db: Session, account_id: UUID, now: Optional[datetime] = None
) -> bool:
    """
    Run a full health resync if the account has not been synced today.

    "Today" is the local calendar day in the account's timezone. Decay is
    evaluated at midday of that day. Accounts without a timezone are never
    synced here.

    Returns:
        True if a resync ran and callers should re-read fresh data
    """
    now = now or _utcnow()
    account = db.get(Account, account_id)
    if account is None or account.timezone is None:
        return False

    if account.last_health_sync >= start_of_day(now, account.timezone):
        logger.debug(f"Lazy health sync skipped for account {account_id}")
        return False

    anchor = local_time_of_day(now, account.timezone, HEALTH_SYNC_ANCHOR_HOUR.value)
    cards = force_sync_cards_health(db, account_id, anchor)
    decks = force_sync_decks_health(db, account_id)
    force_sync_account_health(db, account_id)
    account.last_health_sync = now
    db.flush()

    logger.info(
        f"Lazy health sync for account {account_id}: {cards} cards, {decks} decks, "
        f"anchor={anchor.isoformat()}"
    )
    return True
