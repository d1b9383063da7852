"""
FSRS adapter - wraps the py-fsrs library as the memory model.

Provides:
- CardMemoryState / ReviewLogEntry value types
- next(): new memory state and log entry for a rating
- preview(): due instant each rating would produce
"""

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Optional, Tuple

from fsrs import Card as FSRSCard
from fsrs import Rating, Scheduler, State

from memogarden.learning_engine.config import (
    FSRS_DESIRED_RETENTION,
    FSRS_LEARNING_STEPS,
    FSRS_MAXIMUM_INTERVAL,
    FSRS_PARAMETERS,
    FSRS_RELEARNING_STEPS,
    NEW_CARD_DIFFICULTY,
    NEW_CARD_STABILITY,
)
from memogarden.learning_engine.constants import CardState, ReviewRating
from memogarden.learning_engine.exceptions import MemoryModelError

_RATING_MAP = {
    ReviewRating.AGAIN: Rating.Again,
    ReviewRating.HARD: Rating.Hard,
    ReviewRating.GOOD: Rating.Good,
    ReviewRating.EASY: Rating.Easy,
}

_STATE_TO_FSRS = {
    CardState.LEARNING: State.Learning,
    CardState.REVIEW: State.Review,
    CardState.RELEARNING: State.Relearning,
}

_STATE_FROM_FSRS = {v: k for k, v in _STATE_TO_FSRS.items()}


@dataclass(frozen=True)
class CardMemoryState:
    """Memory state of one card as seen by the scheduler."""

    stability: float
    difficulty: float
    elapsed_days: int
    scheduled_days: int
    reps: int
    lapses: int
    state: CardState
    due: datetime
    last_review: Optional[datetime] = None
    step: Optional[int] = None

    @classmethod
    def initial(cls, now: datetime) -> "CardMemoryState":
        """State of a freshly created card, due immediately."""
        return cls(
            stability=NEW_CARD_STABILITY.value,
            difficulty=NEW_CARD_DIFFICULTY.value,
            elapsed_days=0,
            scheduled_days=0,
            reps=0,
            lapses=0,
            state=CardState.NEW,
            due=now,
        )


@dataclass(frozen=True)
class ReviewLogEntry:
    """Snapshot of the state produced by a review, ready to be appended to the log."""

    rating: ReviewRating
    review: datetime
    state: CardState
    due: datetime
    stability: float
    difficulty: float
    elapsed_days: int
    last_elapsed_days: int
    scheduled_days: int


def _whole_days(later: datetime, earlier: datetime) -> int:
    return max((later - earlier).days, 0)


def _as_utc(value: datetime) -> datetime:
    # py-fsrs only accepts datetimes whose tzinfo is timezone.utc
    if value.tzinfo is None:
        raise MemoryModelError(f"Naive datetime passed to memory model: {value!r}")
    return value.astimezone(UTC)


class MemoryModel:
    """
    FSRS-6 scheduler behind the next(state, rating, now) contract.

    py-fsrs has no New state and does not track reps, lapses or elapsed days,
    so those are derived here from the stored state.
    """

    def __init__(self, scheduler: Optional[Scheduler] = None):
        self.scheduler = scheduler or Scheduler(
            parameters=FSRS_PARAMETERS.value,
            desired_retention=FSRS_DESIRED_RETENTION.value,
            learning_steps=FSRS_LEARNING_STEPS.value,
            relearning_steps=FSRS_RELEARNING_STEPS.value,
            maximum_interval=FSRS_MAXIMUM_INTERVAL.value,
            enable_fuzzing=False,
        )

    def _to_fsrs(self, state: CardMemoryState) -> FSRSCard:
        if state.state == CardState.NEW:
            return FSRSCard(due=_as_utc(state.due))
        # Review cards carry no step, (re)learning cards always do
        step = None if state.state == CardState.REVIEW else (state.step or 0)
        return FSRSCard(
            state=_STATE_TO_FSRS[CardState(state.state)],
            step=step,
            stability=state.stability,
            difficulty=state.difficulty,
            due=_as_utc(state.due),
            last_review=_as_utc(state.last_review) if state.last_review else None,
        )

    def next(
        self, state: CardMemoryState, rating: ReviewRating, now: datetime
    ) -> Tuple[CardMemoryState, ReviewLogEntry]:
        """
        Apply a review to a memory state.

        Args:
            state: Current memory state
            rating: Self-assessed recall quality
            now: Review instant (timezone-aware)

        Returns:
            Tuple of (new_state, log_entry)

        Raises:
            MemoryModelError: If the scheduler fails or returns an invalid state
        """
        rating = ReviewRating(rating)
        now = _as_utc(now)

        try:
            fsrs_card, _ = self.scheduler.review_card(
                self._to_fsrs(state), _RATING_MAP[rating], review_datetime=now
            )
        except MemoryModelError:
            raise
        except (ValueError, TypeError, ArithmeticError) as e:
            raise MemoryModelError(f"Scheduler failed: {e}") from e

        elapsed_days = _whole_days(now, state.last_review) if state.last_review else 0
        new_state = CardMemoryState(
            stability=fsrs_card.stability,
            difficulty=fsrs_card.difficulty,
            elapsed_days=elapsed_days,
            scheduled_days=_whole_days(fsrs_card.due, now),
            reps=state.reps + 1,
            lapses=state.lapses
            + (1 if state.state == CardState.REVIEW and rating == ReviewRating.AGAIN else 0),
            state=_STATE_FROM_FSRS[fsrs_card.state],
            due=fsrs_card.due,
            last_review=now,
            step=fsrs_card.step,
        )
        validate_state(new_state, now)

        log_entry = ReviewLogEntry(
            rating=rating,
            review=now,
            state=new_state.state,
            due=new_state.due,
            stability=new_state.stability,
            difficulty=new_state.difficulty,
            elapsed_days=new_state.elapsed_days,
            last_elapsed_days=state.elapsed_days,
            scheduled_days=new_state.scheduled_days,
        )
        return new_state, log_entry

    def preview(self, state: CardMemoryState, now: datetime) -> dict[ReviewRating, datetime]:
        """Due instant each rating would produce, without persisting anything."""
        return {rating: self.next(state, rating, now)[0].due for rating in ReviewRating}


def validate_state(state: CardMemoryState, now: datetime) -> None:
    """
    Reject memory states that must never be persisted.

    Raises:
        MemoryModelError: On a non-finite or non-positive stability, a
            non-finite difficulty, a naive due date or a due date in the past
    """
    if not isinstance(state.stability, (int, float)) or not math.isfinite(state.stability):
        raise MemoryModelError(f"Invalid stability computed: {state.stability}")
    if state.stability <= 0:
        raise MemoryModelError(f"Stability must be positive, got {state.stability}")
    if not isinstance(state.difficulty, (int, float)) or not math.isfinite(state.difficulty):
        raise MemoryModelError(f"Invalid difficulty computed: {state.difficulty}")
    if not isinstance(state.due, datetime) or state.due.tzinfo is None:
        raise MemoryModelError(f"Invalid due date computed: {state.due!r}")
    if state.due < now:
        raise MemoryModelError(f"Due date {state.due.isoformat()} precedes review {now.isoformat()}")
    if state.state == CardState.NEW:
        raise MemoryModelError("Reviewed card cannot stay New")

