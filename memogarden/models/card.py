"""Card and review log models."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Float, ForeignKey, Index, Integer, SmallInteger, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from memogarden.db.base import Base
from memogarden.db.types import UTCDateTime
from memogarden.learning_engine.constants import CardState
from memogarden.models.mixins import TimestampsMixin, utcnow


class Card(TimestampsMixin, Base):
    """
    Flashcard with user-defined content and app-managed memory state.

    ``retrievability`` is the cached decay value as of the last health sync.
    It stays NULL until the first review, since nothing can be said about
    recall before that.
    """

    __tablename__ = "cards"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    deck_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("decks.id", ondelete="CASCADE"), nullable=False
    )
    front: Mapped[str] = mapped_column(String(300), nullable=False)
    back: Mapped[str] = mapped_column(String(1000), nullable=False)

    # Memory state
    due: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    stability: Mapped[float] = mapped_column(Float, nullable=False, comment="Days")
    difficulty: Mapped[float] = mapped_column(Float, nullable=False)
    elapsed_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    scheduled_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reps: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lapses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    state: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=CardState.NEW)
    step: Mapped[int | None] = mapped_column(
        SmallInteger, nullable=True, comment="Position in the (re)learning steps"
    )
    last_review: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    retrievability: Mapped[float | None] = mapped_column(Float, nullable=True)

    deck: Mapped["Deck"] = relationship(back_populates="cards")  # noqa: F821
    review_logs: Mapped[list["ReviewLog"]] = relationship(back_populates="card")

    __table_args__ = (
        Index("idx_cards_deck_due", "deck_id", "due"),
        Index("idx_cards_deck_deleted", "deck_id", "deleted_at"),
    )


class ReviewLog(Base):
    """
    Append-only record of a single review.

    Holds a snapshot of the memory state produced by the review. Rows are
    never updated or deleted, also after the card is soft-deleted, and remain
    the source of truth for review statistics.
    """

    __tablename__ = "review_logs"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    card_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("cards.id", ondelete="CASCADE"), nullable=False
    )
    answer_attempt: Mapped[str] = mapped_column(
        String(1000), nullable=False, default="", comment="User's attempt at the back, may be empty"
    )
    rating: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    state: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    due: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    stability: Mapped[float] = mapped_column(Float, nullable=False)
    difficulty: Mapped[float] = mapped_column(Float, nullable=False)
    elapsed_days: Mapped[int] = mapped_column(Integer, nullable=False)
    last_elapsed_days: Mapped[int] = mapped_column(Integer, nullable=False)
    scheduled_days: Mapped[int] = mapped_column(Integer, nullable=False)
    review: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    card: Mapped["Card"] = relationship(back_populates="review_logs")

    __table_args__ = (
        Index("idx_review_logs_card_review", "card_id", "review"),
        Index("idx_review_logs_review", "review"),
    )
