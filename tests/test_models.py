"""Tests for model-level validation."""

import pytest

from memogarden.models import Account


@pytest.mark.parametrize("timezone", ["America/New_York", "UTC", "Asia/Kathmandu", None])
def test_known_timezones_accepted(timezone):
    assert Account(timezone=timezone).timezone == timezone


@pytest.mark.parametrize("timezone", ["Mars/Olympus_Mons", "", "EST5EDT/Nowhere"])
def test_unknown_timezone_rejected(timezone):
    with pytest.raises(ValueError, match="Unknown timezone"):
        Account(timezone=timezone)


def test_timezone_checked_on_update():
    account = Account(timezone="UTC")

    with pytest.raises(ValueError):
        account.timezone = "Not/AZone"
    assert account.timezone == "UTC"
