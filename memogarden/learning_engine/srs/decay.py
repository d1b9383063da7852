"""
Forgetting curve.

R = (1 + FACTOR * t / S) ^ DECAY, where t is the number of whole days between
the last review and the anchor instant, clamped at zero, and S is stability.

The same formula exists twice: as a plain function for single cards and as a
SQL expression so that a whole collection can be recomputed in one UPDATE.
"""

from datetime import datetime

from sqlalchemy import func, literal
from sqlalchemy.sql.elements import ColumnElement

from memogarden.db.types import UTCDateTime, elapsed_days
from memogarden.learning_engine.config import DECAY, FACTOR
from memogarden.models.card import Card


def retrievability(stability: float, last_review: datetime, anchor: datetime) -> float:
    """
    Current retrievability of a card.

    Args:
        stability: Card stability in days, must be positive
        last_review: Last review instant, or creation instant if never reviewed
        anchor: Reference instant

    Returns:
        Recall probability in (0, 1]
    """
    if stability <= 0:
        raise ValueError(f"Stability must be positive, got {stability}")
    t = max((anchor - last_review).days, 0)
    return (1 + FACTOR.value * t / stability) ** DECAY.value


def retrievability_expression(anchor: datetime) -> ColumnElement[float]:
    """SQL counterpart of retrievability() over the cards table."""
    since = func.coalesce(Card.last_review, Card.created_at)
    t = elapsed_days(literal(anchor, UTCDateTime()), since)
    return func.power(1 + FACTOR.value * t / Card.stability, DECAY.value)
