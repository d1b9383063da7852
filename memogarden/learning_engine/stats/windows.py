"""
Fixed-length daily series anchored in a user's timezone.

Day keys are local calendar dates formatted as ``YYYY-MM-DD``, so comparing
keys as strings gives the same order as comparing the days themselves.
Bucket dates are the UTC instants at which each local day starts, which
shift by an hour across daylight saving transitions.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Iterable, Union

import pytz

from memogarden.learning_engine.config import PREDICTION_LIMIT, RETROSPECTION_LIMIT


@dataclass(frozen=True)
class DailyCount:
    date: datetime
    count: int


def get_timezone(name: str):
    """
    Resolve an IANA timezone name.

    Raises:
        pytz.UnknownTimeZoneError: If the name is not a known timezone
    """
    return pytz.timezone(name)


def local_date(instant: datetime, timezone: str) -> date:
    return instant.astimezone(get_timezone(timezone)).date()


def day_key(instant: datetime, timezone: str) -> str:
    """Local calendar day of an instant, as ``YYYY-MM-DD``."""
    return local_date(instant, timezone).isoformat()


def start_of_local_date(day: date, timezone: str) -> datetime:
    """UTC instant at which a local calendar date begins."""
    tz = get_timezone(timezone)
    local_midnight = tz.normalize(tz.localize(datetime.combine(day, time.min)))
    return local_midnight.astimezone(UTC)


def start_of_day(instant: datetime, timezone: str) -> datetime:
    """UTC instant at which the local day containing ``instant`` begins."""
    return start_of_local_date(local_date(instant, timezone), timezone)


def local_time_of_day(instant: datetime, timezone: str, hour: int) -> datetime:
    """UTC instant of ``hour``:00 on the local day containing ``instant``."""
    tz = get_timezone(timezone)
    day = local_date(instant, timezone)
    return tz.normalize(tz.localize(datetime.combine(day, time(hour=hour)))).astimezone(UTC)


def to_sparse_daily_counts(entries: Iterable[tuple[Union[str, date], int]]) -> dict[str, int]:
    """
    Collapse (day, count) pairs into a map keyed by day key.

    Days may be given as dates or as ``YYYY-MM-DD`` strings. A datetime counts
    for its own calendar date, so convert instants to the local timezone
    first. Repeated days are summed.
    """
    sparse: dict[str, int] = {}
    for day, count in entries:
        if isinstance(day, datetime):
            day = day.date()
        key = day.isoformat() if isinstance(day, date) else str(day)
        sparse[key] = sparse.get(key, 0) + int(count)
    return sparse


def _check_length(length: int) -> None:
    if length < 0:
        raise ValueError(f"Window length must not be negative, got {length}")


def past_window(
    timezone: str,
    reference: datetime,
    sparse: dict[str, int],
    length: int = RETROSPECTION_LIMIT.value,
) -> list[DailyCount]:
    """
    Daily counts for the ``length`` local days ending with the reference day.

    Args:
        timezone: IANA timezone name defining day boundaries
        reference: Instant whose local day closes the window
        sparse: Counts keyed by day key, missing days count as 0
        length: Number of days in the window

    Returns:
        One DailyCount per day, oldest first
    """
    _check_length(length)
    today = local_date(reference, timezone)
    series = []
    for offset in range(length - 1, -1, -1):
        day = today - timedelta(days=offset)
        series.append(
            DailyCount(date=start_of_local_date(day, timezone), count=sparse.get(day.isoformat(), 0))
        )
    return series


def future_window(
    timezone: str,
    reference: datetime,
    sparse: dict[str, int],
    length: int = PREDICTION_LIMIT.value,
) -> list[DailyCount]:
    """
    Daily counts for the ``length`` local days starting with the reference day.

    Counts for days before the reference day are overdue and are added to the
    first bucket, since an overdue card is presented for review right away.
    Counts past the end of the window are ignored.
    """
    _check_length(length)
    today = local_date(reference, timezone)
    today_key = today.isoformat()
    overdue = sum(count for key, count in sparse.items() if key < today_key)

    series = []
    for offset in range(length):
        day = today + timedelta(days=offset)
        count = sparse.get(day.isoformat(), 0)
        if offset == 0:
            count += overdue
        series.append(DailyCount(date=start_of_local_date(day, timezone), count=count))
    return series
