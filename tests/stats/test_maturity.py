"""Tests for maturity bucketing."""

from types import SimpleNamespace

import pytest

from memogarden.learning_engine.constants import CardMaturity, CardState
from memogarden.learning_engine.stats.maturity import get_card_maturity, maturity_histogram


@pytest.mark.parametrize(
    "state,scheduled_days,expected",
    [
        (CardState.NEW, 0, CardMaturity.SEED),
        (CardState.LEARNING, 0, CardMaturity.SPROUT),
        (CardState.RELEARNING, 100, CardMaturity.SPROUT),
        (CardState.REVIEW, 0, CardMaturity.SAPLING),
        (CardState.REVIEW, 15, CardMaturity.SAPLING),
        (CardState.REVIEW, 16, CardMaturity.BUDDING),
        (CardState.REVIEW, 30, CardMaturity.BUDDING),
        (CardState.REVIEW, 31, CardMaturity.MATURE),
        (CardState.REVIEW, 61, CardMaturity.MATURE),
        (CardState.REVIEW, 62, CardMaturity.MIGHTY),
        (CardState.REVIEW, 3650, CardMaturity.MIGHTY),
    ],
)
def test_get_card_maturity(state, scheduled_days, expected):
    assert get_card_maturity(state, scheduled_days) == expected


def card(state, scheduled_days=0, deleted_at=None):
    return SimpleNamespace(state=state, scheduled_days=scheduled_days, deleted_at=deleted_at)


class TestMaturityHistogram:
    def test_every_stage_present_in_order(self):
        histogram = maturity_histogram([])

        assert list(histogram) == list(CardMaturity)
        assert all(count == 0 for count in histogram.values())

    def test_counts(self):
        cards = [
            card(CardState.NEW),
            card(CardState.NEW),
            card(CardState.LEARNING),
            card(CardState.REVIEW, 20),
            card(CardState.REVIEW, 100),
        ]

        histogram = maturity_histogram(cards)

        assert histogram[CardMaturity.SEED] == 2
        assert histogram[CardMaturity.SPROUT] == 1
        assert histogram[CardMaturity.BUDDING] == 1
        assert histogram[CardMaturity.MIGHTY] == 1
        assert sum(histogram.values()) == len(cards)

    def test_deleted_cards_skipped(self):
        histogram = maturity_histogram([card(CardState.NEW, deleted_at="yesterday")])

        assert sum(histogram.values()) == 0
