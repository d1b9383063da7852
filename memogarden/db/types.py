"""Column types and SQL constructs that behave the same on PostgreSQL and SQLite."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import ColumnElement
from sqlalchemy.sql.functions import FunctionElement
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware timestamp stored as UTC.

    Naive datetimes are rejected on the way in. Values read back are always
    aware UTC datetimes, including on SQLite, which drops the offset.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime is not allowed: {value!r}")
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class elapsed_days(FunctionElement):
    """
    Whole days elapsed between two timestamps, clamped at zero.

    ``elapsed_days(anchor, since)`` is 0 when ``anchor`` precedes ``since``.
    """

    type = Integer()
    inherit_cache = True

    def __init__(self, anchor: ColumnElement, since: ColumnElement):
        super().__init__(anchor, since)


@compiles(elapsed_days)
def _elapsed_days_default(element, compiler, **kw) -> str:
    anchor, since = list(element.clauses)
    return "GREATEST(EXTRACT(DAY FROM {} - {}), 0)".format(
        compiler.process(anchor, **kw), compiler.process(since, **kw)
    )


@compiles(elapsed_days, "sqlite")
def _elapsed_days_sqlite(element, compiler, **kw) -> str:
    anchor, since = list(element.clauses)
    # Integer seconds, so exact multiples of a day never truncate to one day less
    return (
        "max((CAST(strftime('%s', {}) AS INTEGER) - "
        "CAST(strftime('%s', {}) AS INTEGER)) / 86400, 0)"
    ).format(compiler.process(anchor, **kw), compiler.process(since, **kw))
