"""
Learning Engine Configuration - Central Constants Registry.

Every constant used by the memory model, the decay function, the health
synchronizer and the statistics windows is declared here with provenance.
Algorithm modules import from this registry instead of hard-coding numbers.

Each constant includes:
- value: The actual constant value
- source: Citation (paper, library docs, product decision)
- notes: Rationale and context
- validated: Whether the value has been checked against its source
"""

import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Any


@dataclass(frozen=True)
class SourcedValue:
    """
    A constant value with documented provenance.

    All learning engine constants must use this type to enforce documentation.
    """

    value: Any
    source: str
    notes: str = ""
    validated: bool = False

    def __post_init__(self):
        if not self.source or self.source.strip() == "":
            raise ValueError(f"SourcedValue must have non-empty source. Got: {self.source}")


# =============================================================================
# FSRS Memory Model Constants
# =============================================================================

# FSRS-6 Default Parameters
# Reference: https://github.com/open-spaced-repetition/py-fsrs
FSRS_PARAMETERS = SourcedValue(
    value=(
        0.212,
        1.2931,
        2.3065,
        8.2956,
        6.4133,
        0.8334,
        3.0194,
        0.001,
        1.8722,
        0.1666,
        0.796,
        1.4835,
        0.0614,
        0.2629,
        1.6483,
        0.6014,
        1.8729,
        0.5425,
        0.0912,
        0.0658,
        0.1542,
    ),
    source="py-fsrs v6 DEFAULT_PARAMETERS (https://github.com/open-spaced-repetition/py-fsrs)",
    notes="21 population-level FSRS-6 weights. The last weight is the forgetting-curve decay.",
    validated=True,
)

FSRS_DESIRED_RETENTION = SourcedValue(
    value=0.9,
    source="py-fsrs Scheduler default desired_retention",
    notes="Intervals are chosen so that recall probability at the due date is 90%.",
    validated=True,
)

FSRS_LEARNING_STEPS = SourcedValue(
    value=(timedelta(minutes=1), timedelta(minutes=10)),
    source="py-fsrs Scheduler default learning_steps",
    notes="Short-term steps a new card walks through before graduating to Review.",
    validated=True,
)

FSRS_RELEARNING_STEPS = SourcedValue(
    value=(timedelta(minutes=10),),
    source="py-fsrs Scheduler default relearning_steps",
    notes="Steps a lapsed Review card walks through before returning to Review.",
    validated=True,
)

FSRS_MAXIMUM_INTERVAL = SourcedValue(
    value=36500,
    source="py-fsrs Scheduler default maximum_interval",
    notes="Upper bound on a scheduled interval, in days.",
    validated=True,
)

# =============================================================================
# Decay (Forgetting Curve) Constants
# =============================================================================

# R(t) = (1 + FACTOR * t / S) ^ DECAY
# Reference: https://github.com/open-spaced-repetition/fsrs4anki/wiki/The-Algorithm
DECAY = SourcedValue(
    value=-FSRS_PARAMETERS.value[20],
    source="FSRS-6 forgetting curve, DECAY = -w[20]",
    notes="Negative exponent of the power forgetting curve.",
    validated=True,
)

FACTOR = SourcedValue(
    value=0.9 ** (1 / DECAY.value) - 1,
    source="FSRS-6 forgetting curve, FACTOR = 0.9 ^ (1 / DECAY) - 1",
    notes="Chosen so that R equals 0.9 exactly when elapsed days equal stability.",
    validated=True,
)

NEW_CARD_STABILITY = SourcedValue(
    value=0.1,
    source="MemoGarden product decision",
    notes="Placeholder stability stored for never-reviewed cards. "
    "Such cards are excluded from decay recompute, so the value never reaches the curve.",
)

NEW_CARD_DIFFICULTY = SourcedValue(
    value=0.0,
    source="MemoGarden product decision",
    notes="Placeholder difficulty stored for never-reviewed cards.",
)

RETRIEVABILITY_AFTER_REVIEW = SourcedValue(
    value=1.0,
    source="FSRS forgetting curve at t = 0",
    notes="A just-reviewed card is at maximum recall regardless of its previous decay.",
    validated=True,
)

# =============================================================================
# Maturity Bucketing Constants
# =============================================================================

MATURITY_MID_THRESHOLD_DAYS = SourcedValue(
    value=16,
    source="MemoGarden maturity policy",
    notes="Review cards scheduled fewer days ahead than this are Saplings, otherwise Budding.",
)

MATURITY_HIGH_THRESHOLD_DAYS = SourcedValue(
    value=31,
    source="MemoGarden maturity policy",
    notes="Review cards scheduled fewer days ahead than this are at most Budding.",
)

MATURITY_MAX_THRESHOLD_DAYS = SourcedValue(
    value=62,
    source="MemoGarden maturity policy",
    notes="Review cards scheduled at least this many days ahead are Mighty.",
)

# =============================================================================
# Health Banding Constants (percent of retrievability)
# =============================================================================

HEALTH_WITHERING_PERCENT = SourcedValue(
    value=0,
    source="MemoGarden health policy",
    notes="Lower bound of the Withering band.",
)

HEALTH_NEGLECTED_PERCENT = SourcedValue(
    value=40,
    source="MemoGarden health policy",
    notes="Lower bound of the Neglected band.",
)

HEALTH_LUSH_PERCENT = SourcedValue(
    value=90,
    source="MemoGarden health policy, aligned with FSRS_DESIRED_RETENTION",
    notes="Lower bound of the Lush band. Cards at their due date sit right on it.",
)

HEALTH_FRESHLY_WATERED_PERCENT = SourcedValue(
    value=100,
    source="MemoGarden health policy",
    notes="Only cards reviewed since the last sync reach this band.",
)

# =============================================================================
# Synchronization and Statistics Constants
# =============================================================================

HEALTH_SYNC_ANCHOR_HOUR = SourcedValue(
    value=12,
    source="MemoGarden lazy sync policy",
    notes="Local hour used as the decay anchor of a daily sync. "
    "Midday minimises the distance to any moment of the same day.",
)

RETROSPECTION_LIMIT = SourcedValue(
    value=30,
    source="MemoGarden statistics page",
    notes="Number of past days shown in the review history series.",
)

PREDICTION_LIMIT = SourcedValue(
    value=30,
    source="MemoGarden statistics page",
    notes="Number of days, today included, shown in the due forecast series.",
)


# =============================================================================
# Validation Functions
# =============================================================================


def validate_config():
    """
    Validate all constants at import time.

    Raises:
        ValueError: If any constant fails validation
    """
    errors = []

    if len(FSRS_PARAMETERS.value) != 21:
        errors.append(f"FSRS-6 requires 21 parameters, got {len(FSRS_PARAMETERS.value)}")

    for i, w in enumerate(FSRS_PARAMETERS.value):
        if not math.isfinite(w):
            errors.append(f"FSRS parameter {i} is not finite: {w}")

    if not (0 < FSRS_DESIRED_RETENTION.value < 1):
        errors.append(
            f"FSRS_DESIRED_RETENTION must be in (0, 1), got {FSRS_DESIRED_RETENTION.value}"
        )

    if FSRS_MAXIMUM_INTERVAL.value <= 0:
        errors.append("FSRS_MAXIMUM_INTERVAL must be positive")

    if DECAY.value >= 0:
        errors.append(f"DECAY must be negative, got {DECAY.value}")

    # R(S) must equal the desired retention anchor of the curve
    if not math.isclose((1 + FACTOR.value) ** DECAY.value, 0.9):
        errors.append("FACTOR and DECAY do not place R = 0.9 at t = S")

    if NEW_CARD_STABILITY.value <= 0:
        errors.append("NEW_CARD_STABILITY must be positive")

    if not (0 <= RETRIEVABILITY_AFTER_REVIEW.value <= 1):
        errors.append("RETRIEVABILITY_AFTER_REVIEW must be in [0, 1]")

    maturity = [
        MATURITY_MID_THRESHOLD_DAYS.value,
        MATURITY_HIGH_THRESHOLD_DAYS.value,
        MATURITY_MAX_THRESHOLD_DAYS.value,
    ]
    if not all(a < b for a, b in zip(maturity, maturity[1:])):
        errors.append(f"Maturity thresholds must be strictly increasing, got {maturity}")

    health = [
        HEALTH_WITHERING_PERCENT.value,
        HEALTH_NEGLECTED_PERCENT.value,
        HEALTH_LUSH_PERCENT.value,
        HEALTH_FRESHLY_WATERED_PERCENT.value,
    ]
    if not all(a < b for a, b in zip(health, health[1:])):
        errors.append(f"Health thresholds must be strictly increasing, got {health}")
    if health[0] != 0 or health[-1] != 100:
        errors.append("Health thresholds must span 0..100 percent")

    if not (0 <= HEALTH_SYNC_ANCHOR_HOUR.value <= 23):
        errors.append("HEALTH_SYNC_ANCHOR_HOUR must be an hour of the day")

    for name, const in [
        ("RETROSPECTION_LIMIT", RETROSPECTION_LIMIT),
        ("PREDICTION_LIMIT", PREDICTION_LIMIT),
    ]:
        if const.value <= 0:
            errors.append(f"{name} must be positive, got {const.value}")

    if errors:
        raise ValueError("Constant validation failed:\n" + "\n".join(f"  - {e}" for e in errors))


# Validate on import
validate_config()
