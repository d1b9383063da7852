"""Account model."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

import pytz
from sqlalchemy import Float, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from memogarden.db.base import Base
from memogarden.db.types import UTCDateTime
from memogarden.models.mixins import utcnow


class Account(Base):
    """
    Owner of a card collection.

    Carries the collection-wide health aggregate and the watermark used by
    the lazy health sync. ``timezone`` defines the account's day boundaries
    and only accepts IANA names known to pytz.
    """

    __tablename__ = "accounts"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    timezone: Mapped[str | None] = mapped_column(
        String(50), nullable=True, comment="IANA timezone name, NULL until inferred"
    )
    retrievability: Mapped[float | None] = mapped_column(
        Float, nullable=True, comment="Mean retrievability of all active cards"
    )
    last_health_sync: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, comment="Last lazy health sync"
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    decks: Mapped[list["Deck"]] = relationship(back_populates="account")  # noqa: F821

    @validates("timezone")
    def validate_timezone(self, key: str, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value!r}")
        return value
