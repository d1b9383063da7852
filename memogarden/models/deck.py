"""Deck model."""

from uuid import UUID, uuid4

from sqlalchemy import Float, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from memogarden.db.base import Base
from memogarden.models.mixins import TimestampsMixin


class Deck(TimestampsMixin, Base):
    """Deck of flashcards, generally united by some topic."""

    __tablename__ = "decks"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    account_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    retrievability: Mapped[float | None] = mapped_column(
        Float, nullable=True, comment="Mean retrievability of active cards, NULL if none has one"
    )

    account: Mapped["Account"] = relationship(back_populates="decks")  # noqa: F821
    cards: Mapped[list["Card"]] = relationship(back_populates="deck")  # noqa: F821

    __table_args__ = (Index("idx_decks_account", "account_id"),)
