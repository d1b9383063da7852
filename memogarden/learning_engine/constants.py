"""Enumerations shared by the learning engine, the models and the API."""

from enum import IntEnum


class CardState(IntEnum):
    """Memory-model state of a card. NEW cards have never been reviewed."""

    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


class ReviewRating(IntEnum):
    """Self-assessed recall quality submitted with a review."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


class CardMaturity(IntEnum):
    """
    Maturity stage derived from card state and scheduled interval.

    Numeric values follow the semantic order, so they can be used for sorting.
    """

    SEED = 0
    SPROUT = 1
    SAPLING = 2
    BUDDING = 3
    MATURE = 4
    MIGHTY = 5


class HealthState(IntEnum):
    """Discrete health band of a card, a deck or a whole collection."""

    UNKNOWN = 0
    WITHERING = 1
    NEGLECTED = 2
    LUSH = 3
    FRESHLY_WATERED = 4
