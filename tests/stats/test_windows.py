"""Tests for timezone-anchored daily windows."""

from datetime import UTC, date, datetime, timedelta

import pytest

from memogarden.learning_engine.stats.windows import (
    day_key,
    future_window,
    local_time_of_day,
    past_window,
    start_of_day,
    to_sparse_daily_counts,
)

NEW_YORK = "America/New_York"
# 2020-03-03 21:02 in New York
REFERENCE = datetime(2020, 3, 4, 2, 2, tzinfo=UTC)


class TestDayBoundaries:
    def test_day_key_is_local_date(self):
        assert day_key(REFERENCE, NEW_YORK) == "2020-03-03"
        assert day_key(REFERENCE, "UTC") == "2020-03-04"

    def test_start_of_day(self):
        assert start_of_day(REFERENCE, NEW_YORK) == datetime(2020, 3, 3, 5, 0, tzinfo=UTC)

    def test_start_of_day_after_dst(self):
        instant = datetime(2020, 3, 9, 12, 0, tzinfo=UTC)
        assert start_of_day(instant, NEW_YORK) == datetime(2020, 3, 9, 4, 0, tzinfo=UTC)

    def test_local_noon(self):
        assert local_time_of_day(REFERENCE, NEW_YORK, 12) == datetime(2020, 3, 3, 17, 0, tzinfo=UTC)
        after_dst = datetime(2020, 3, 10, 12, 0, tzinfo=UTC)
        assert local_time_of_day(after_dst, NEW_YORK, 12) == datetime(2020, 3, 10, 16, 0, tzinfo=UTC)


class TestToSparseDailyCounts:
    def test_keys_dates_and_strings(self):
        sparse = to_sparse_daily_counts([(date(2020, 3, 1), 2), ("2020-03-02", 5)])
        assert sparse == {"2020-03-01": 2, "2020-03-02": 5}

    def test_repeated_days_are_summed(self):
        sparse = to_sparse_daily_counts([("2020-03-01", 1), (date(2020, 3, 1), 1)])
        assert sparse == {"2020-03-01": 2}

    def test_empty(self):
        assert to_sparse_daily_counts([]) == {}

    def test_datetimes_count_for_their_date(self):
        sparse = to_sparse_daily_counts(
            [(datetime(2020, 3, 1, 23, 30, tzinfo=UTC), 1), ("2020-03-01", 2)]
        )
        assert sparse == {"2020-03-01": 3}


class TestPastWindow:
    def test_empty_map_gives_zero_counts(self):
        window = past_window(NEW_YORK, REFERENCE, {})

        assert len(window) == 30
        assert all(entry.count == 0 for entry in window)
        assert window[0].date == datetime(2020, 2, 3, 5, 0, tzinfo=UTC)
        assert window[-1].date == datetime(2020, 3, 3, 5, 0, tzinfo=UTC)

    def test_counts_looked_up_by_local_day(self):
        sparse = {"2020-03-03": 4, "2020-02-03": 1, "2020-02-02": 9, "2020-03-04": 7}

        window = past_window(NEW_YORK, REFERENCE, sparse)

        assert window[-1].count == 4
        assert window[0].count == 1
        assert sum(entry.count for entry in window) == 5

    def test_custom_length(self):
        window = past_window(NEW_YORK, REFERENCE, {"2020-03-01": 2}, length=3)

        assert [entry.count for entry in window] == [2, 0, 0]

    def test_zero_length(self):
        assert past_window(NEW_YORK, REFERENCE, {"2020-03-03": 1}, length=0) == []

    def test_negative_length_rejected(self):
        with pytest.raises(ValueError):
            past_window(NEW_YORK, REFERENCE, {}, length=-1)


class TestFutureWindow:
    def test_starts_today(self):
        window = future_window(NEW_YORK, REFERENCE, {})

        assert len(window) == 30
        assert window[0].date == datetime(2020, 3, 3, 5, 0, tzinfo=UTC)

    def test_overdue_folded_into_first_bucket(self):
        sparse = {"2020-03-01": 5, "2020-03-03": 3}

        window = future_window(NEW_YORK, REFERENCE, sparse)

        assert window[0].count == 8
        assert sum(entry.count for entry in window) == 8

    def test_entries_map_to_own_day(self):
        sparse = {"2020-03-04": 2, "2020-04-01": 6}

        window = future_window(NEW_YORK, REFERENCE, sparse)

        assert window[0].count == 0
        assert window[1].count == 2
        assert window[29].count == 6

    def test_entries_past_the_window_ignored(self):
        window = future_window(NEW_YORK, REFERENCE, {"2020-04-02": 11})

        assert sum(entry.count for entry in window) == 0

    def test_daylight_saving_transition(self):
        window = future_window(NEW_YORK, REFERENCE, {})

        assert window[5].date == datetime(2020, 3, 8, 5, 0, tzinfo=UTC)
        assert window[6].date == datetime(2020, 3, 9, 4, 0, tzinfo=UTC)
        # 23 hours between the two local midnights
        assert window[6].date - window[5].date == timedelta(hours=23)
