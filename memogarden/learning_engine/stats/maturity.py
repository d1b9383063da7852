"""Maturity stages of cards."""

from typing import Iterable

from sqlalchemy import case

from memogarden.learning_engine.config import (
    MATURITY_HIGH_THRESHOLD_DAYS,
    MATURITY_MAX_THRESHOLD_DAYS,
    MATURITY_MID_THRESHOLD_DAYS,
)
from memogarden.learning_engine.constants import CardMaturity, CardState
from memogarden.models import Card


def get_card_maturity(state: CardState, scheduled_days: int) -> CardMaturity:
    """
    Maturity stage of a card.

    New cards are Seeds and (re)learning cards are Sprouts. Review cards grow
    with their scheduled interval.
    """
    if state == CardState.NEW:
        return CardMaturity.SEED
    if state in (CardState.LEARNING, CardState.RELEARNING):
        return CardMaturity.SPROUT
    if scheduled_days < MATURITY_MID_THRESHOLD_DAYS.value:
        return CardMaturity.SAPLING
    if scheduled_days < MATURITY_HIGH_THRESHOLD_DAYS.value:
        return CardMaturity.BUDDING
    if scheduled_days < MATURITY_MAX_THRESHOLD_DAYS.value:
        return CardMaturity.MATURE
    return CardMaturity.MIGHTY


def empty_histogram() -> dict[CardMaturity, int]:
    return {maturity: 0 for maturity in CardMaturity}


def maturity_histogram(cards: Iterable) -> dict[CardMaturity, int]:
    """
    Count cards per maturity stage.

    Every stage is present in the result, in stage order. Deleted cards
    (anything with a ``deleted_at``) are skipped.
    """
    histogram = empty_histogram()
    for card in cards:
        if getattr(card, "deleted_at", None) is not None:
            continue
        histogram[get_card_maturity(CardState(card.state), card.scheduled_days)] += 1
    return histogram


def maturity_expression():
    """SQL counterpart of get_card_maturity() over the cards table."""
    return case(
        (Card.state == CardState.NEW, int(CardMaturity.SEED)),
        (Card.state.in_([CardState.LEARNING, CardState.RELEARNING]), int(CardMaturity.SPROUT)),
        (Card.scheduled_days < MATURITY_MID_THRESHOLD_DAYS.value, int(CardMaturity.SAPLING)),
        (Card.scheduled_days < MATURITY_HIGH_THRESHOLD_DAYS.value, int(CardMaturity.BUDDING)),
        (Card.scheduled_days < MATURITY_MAX_THRESHOLD_DAYS.value, int(CardMaturity.MATURE)),
        else_=int(CardMaturity.MIGHTY),
    )
