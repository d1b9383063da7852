"""Tests for the forgetting curve, in Python and in SQL."""

import math
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select

from memogarden.learning_engine.config import DECAY, FACTOR, FSRS_PARAMETERS
from memogarden.learning_engine.srs.decay import retrievability, retrievability_expression
from memogarden.models import Card

LAST_REVIEW = datetime(2020, 3, 1, 12, 0, tzinfo=UTC)


class TestRetrievability:
    """Tests for retrievability()."""

    def test_constants_match_fsrs6(self):
        assert DECAY.value == -FSRS_PARAMETERS.value[20]
        assert math.isclose((1 + FACTOR.value) ** DECAY.value, 0.9)

    def test_just_reviewed_is_one(self):
        assert retrievability(5.0, LAST_REVIEW, LAST_REVIEW) == 1.0

    def test_stability_days_later_is_ninety_percent(self):
        anchor = LAST_REVIEW + timedelta(days=10)
        assert math.isclose(retrievability(10.0, LAST_REVIEW, anchor), 0.9)

    def test_partial_days_are_truncated(self):
        anchor = LAST_REVIEW + timedelta(days=1, hours=23)
        assert retrievability(3.0, LAST_REVIEW, anchor) == retrievability(
            3.0, LAST_REVIEW, LAST_REVIEW + timedelta(days=1)
        )

    def test_same_day_is_one(self):
        assert retrievability(3.0, LAST_REVIEW, LAST_REVIEW + timedelta(hours=20)) == 1.0

    def test_anchor_before_review_is_clamped(self):
        assert retrievability(3.0, LAST_REVIEW, LAST_REVIEW - timedelta(days=4)) == 1.0

    def test_higher_stability_decays_slower(self):
        anchor = LAST_REVIEW + timedelta(days=30)
        assert retrievability(50.0, LAST_REVIEW, anchor) > retrievability(5.0, LAST_REVIEW, anchor)

    def test_non_positive_stability_rejected(self):
        with pytest.raises(ValueError):
            retrievability(0.0, LAST_REVIEW, LAST_REVIEW)


class TestRetrievabilityExpression:
    """The SQL expression must agree with the Python function."""

    @pytest.mark.parametrize("days", [0, 1, 7, 10, 45, 400])
    def test_matches_python(self, db, make_account, make_deck, make_card, days):
        deck = make_deck(make_account())
        card = make_card(deck, last_review=LAST_REVIEW, stability=10.0)
        anchor = LAST_REVIEW + timedelta(days=days)

        value = db.execute(
            select(retrievability_expression(anchor)).where(Card.id == card.id)
        ).scalar_one()

        assert math.isclose(value, retrievability(10.0, LAST_REVIEW, anchor), rel_tol=1e-9)

    def test_anchor_before_review_is_one(self, db, make_account, make_deck, make_card):
        deck = make_deck(make_account())
        card = make_card(deck, last_review=LAST_REVIEW, stability=2.0)

        value = db.execute(
            select(retrievability_expression(LAST_REVIEW - timedelta(days=3))).where(
                Card.id == card.id
            )
        ).scalar_one()

        assert value == 1.0
