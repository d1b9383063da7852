"""Tests for the FSRS memory model adapter."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest
import pytz

from memogarden.learning_engine.constants import CardState, ReviewRating
from memogarden.learning_engine.exceptions import MemoryModelError
from memogarden.learning_engine.srs.fsrs_adapter import (
    CardMemoryState,
    MemoryModel,
    validate_state,
)

NOW = datetime(2024, 1, 15, 9, 30, tzinfo=UTC)


@pytest.fixture
def model():
    return MemoryModel()


@pytest.fixture
def review_state():
    """A Review card last seen ten days ago with a ten day stability."""
    return CardMemoryState(
        stability=10.0,
        difficulty=5.0,
        elapsed_days=4,
        scheduled_days=10,
        reps=3,
        lapses=0,
        state=CardState.REVIEW,
        due=NOW,
        last_review=NOW - timedelta(days=10),
    )


class BrokenScheduler:
    def review_card(self, card, rating, review_datetime=None):
        raise ValueError("bad parameters")


class TestNext:
    def test_new_card_good(self, model):
        state, log = model.next(CardMemoryState.initial(NOW), ReviewRating.GOOD, NOW)

        assert state.state == CardState.LEARNING
        assert state.reps == 1
        assert state.lapses == 0
        assert state.elapsed_days == 0
        assert state.last_review == NOW
        assert state.due > NOW
        assert state.stability > 0
        assert log.rating == ReviewRating.GOOD
        assert log.review == NOW
        assert log.state == CardState.LEARNING

    def test_new_card_easy_graduates(self, model):
        state, _ = model.next(CardMemoryState.initial(NOW), ReviewRating.EASY, NOW)

        assert state.state == CardState.REVIEW
        assert state.scheduled_days >= 1
        assert state.step is None

    def test_review_lapse(self, model, review_state):
        state, log = model.next(review_state, ReviewRating.AGAIN, NOW)

        assert state.state == CardState.RELEARNING
        assert state.lapses == 1
        assert state.reps == 4
        assert state.elapsed_days == 10
        assert state.stability < review_state.stability
        assert log.last_elapsed_days == 4

    def test_review_good_extends_interval(self, model, review_state):
        state, _ = model.next(review_state, ReviewRating.GOOD, NOW)

        assert state.state == CardState.REVIEW
        assert state.lapses == 0
        assert state.stability > review_state.stability
        assert state.scheduled_days > review_state.scheduled_days

    def test_local_review_instant_normalized(self, model):
        local = NOW.astimezone(pytz.timezone("Asia/Tokyo"))

        state, log = model.next(CardMemoryState.initial(NOW), ReviewRating.GOOD, local)

        assert log.review == NOW
        assert state.last_review.utcoffset() == timedelta(0)

    def test_naive_datetime_rejected(self, model):
        with pytest.raises(MemoryModelError):
            model.next(CardMemoryState.initial(NOW), ReviewRating.GOOD, NOW.replace(tzinfo=None))

    def test_scheduler_failure_wrapped(self):
        model = MemoryModel(scheduler=BrokenScheduler())

        with pytest.raises(MemoryModelError) as exc_info:
            model.next(CardMemoryState.initial(NOW), ReviewRating.GOOD, NOW)

        assert "bad parameters" in exc_info.value.message


class TestPreview:
    def test_all_ratings_ordered(self, model, review_state):
        dues = model.preview(review_state, NOW)

        assert set(dues) == set(ReviewRating)
        assert dues[ReviewRating.AGAIN] < dues[ReviewRating.HARD]
        assert dues[ReviewRating.HARD] < dues[ReviewRating.GOOD]
        assert dues[ReviewRating.GOOD] < dues[ReviewRating.EASY]

    def test_new_card(self, model):
        dues = model.preview(CardMemoryState.initial(NOW), NOW)

        assert all(due > NOW for due in dues.values())
        assert dues[ReviewRating.AGAIN] < dues[ReviewRating.EASY]


class TestValidateState:
    @pytest.fixture
    def valid(self):
        return CardMemoryState(
            stability=3.0,
            difficulty=4.0,
            elapsed_days=0,
            scheduled_days=3,
            reps=1,
            lapses=0,
            state=CardState.REVIEW,
            due=NOW + timedelta(days=3),
            last_review=NOW,
        )

    def test_accepts_valid_state(self, valid):
        validate_state(valid, NOW)

    @pytest.mark.parametrize(
        "changes",
        [
            {"stability": float("nan")},
            {"stability": float("inf")},
            {"stability": 0.0},
            {"stability": -1.0},
            {"difficulty": float("nan")},
            {"due": NOW - timedelta(seconds=1)},
            {"due": NOW.replace(tzinfo=None)},
            {"state": CardState.NEW},
        ],
    )
    def test_rejects_invalid_state(self, valid, changes):
        with pytest.raises(MemoryModelError):
            validate_state(replace(valid, **changes), NOW)
