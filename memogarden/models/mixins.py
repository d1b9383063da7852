"""Column groups shared by user-managed entities."""

from datetime import UTC, datetime

from sqlalchemy.orm import Mapped, mapped_column

from memogarden.db.types import UTCDateTime


def utcnow() -> datetime:
    return datetime.now(UTC)


class TimestampsMixin:
    """Created/updated timestamps plus a soft-delete marker."""

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    # Only user interactions bump updated_at; health recomputes do not
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
