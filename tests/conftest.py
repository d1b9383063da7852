"""Pytest configuration and shared fixtures."""

import os

# Must be set before memogarden is imported: settings and the engine are module globals
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"

from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from memogarden.db.base import Base
from memogarden.db.engine import engine
from memogarden.db.session import SessionLocal, get_db
from memogarden.learning_engine.constants import CardState
from memogarden.main import app
from memogarden.models import Account, Card, Deck

# Reference instant of the timezone fixtures: 2020-03-03 21:02 in New York
REFERENCE = datetime(2020, 3, 4, 2, 2, tzinfo=UTC)
NEW_YORK = "America/New_York"


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh in-memory schema per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_account(db):
    """Factory for accounts. Synced long ago by default, so a lazy sync is due."""

    def _make(
        timezone: Optional[str] = NEW_YORK,
        last_health_sync: datetime = datetime(2000, 1, 1, tzinfo=UTC),
    ) -> Account:
        account = Account(timezone=timezone, last_health_sync=last_health_sync)
        db.add(account)
        db.flush()
        return account

    return _make


@pytest.fixture
def make_deck(db):
    def _make(account: Account, name: str = "Deck", deleted_at: Optional[datetime] = None) -> Deck:
        deck = Deck(account_id=account.id, name=name, deleted_at=deleted_at)
        db.add(deck)
        db.flush()
        return deck

    return _make


@pytest.fixture
def make_card(db):
    """
    Factory for cards with an explicit memory state.

    Passing ``last_review`` makes a reviewed Review card, otherwise a New card.
    """

    def _make(
        deck: Deck,
        last_review: Optional[datetime] = None,
        stability: float = 10.0,
        difficulty: float = 5.0,
        state: Optional[CardState] = None,
        scheduled_days: int = 0,
        due: Optional[datetime] = None,
        retrievability: Optional[float] = None,
        created_at: datetime = REFERENCE - timedelta(days=60),
        deleted_at: Optional[datetime] = None,
    ) -> Card:
        if state is None:
            state = CardState.NEW if last_review is None else CardState.REVIEW
        if state == CardState.NEW:
            stability = 0.1
            difficulty = 0.0
        card = Card(
            deck_id=deck.id,
            front="front",
            back="back",
            due=due or (last_review + timedelta(days=scheduled_days) if last_review else created_at),
            stability=stability,
            difficulty=difficulty,
            elapsed_days=0,
            scheduled_days=scheduled_days,
            reps=0 if last_review is None else 1,
            lapses=0,
            state=int(state),
            step=0 if state in (CardState.LEARNING, CardState.RELEARNING) else None,
            last_review=last_review,
            retrievability=retrievability,
            created_at=created_at,
            updated_at=created_at,
            deleted_at=deleted_at,
        )
        db.add(card)
        db.flush()
        return card

    return _make


@pytest.fixture
def client(db) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client with database dependency override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close the session, it's managed by the db fixture

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
