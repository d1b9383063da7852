"""Discrete health bands over retrievability."""

import math
from typing import Optional

from memogarden.learning_engine.config import (
    HEALTH_FRESHLY_WATERED_PERCENT,
    HEALTH_LUSH_PERCENT,
    HEALTH_NEGLECTED_PERCENT,
)
from memogarden.learning_engine.constants import HealthState


def to_retrievability_percent(retrievability: Optional[float]) -> Optional[int]:
    """Integer percentage, rounded up, or None for objects without a health value."""
    if retrievability is None:
        return None
    return math.ceil(retrievability * 100)


def to_health_state(retrievability: Optional[float]) -> HealthState:
    """
    Map a retrievability in [0, 1] to its health band.

    NULL retrievability (a Seed card, a deck without reviewed cards) has no
    band and maps to UNKNOWN.
    """
    percent = to_retrievability_percent(retrievability)
    if percent is None:
        return HealthState.UNKNOWN
    if percent >= HEALTH_FRESHLY_WATERED_PERCENT.value:
        return HealthState.FRESHLY_WATERED
    if percent >= HEALTH_LUSH_PERCENT.value:
        return HealthState.LUSH
    if percent >= HEALTH_NEGLECTED_PERCENT.value:
        return HealthState.NEGLECTED
    return HealthState.WITHERING
