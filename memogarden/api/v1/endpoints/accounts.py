"""Account-level endpoints: lazy health sync, statistics and due counts."""

from datetime import UTC, datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query

from memogarden.core.dependencies import CurrentAccount, DbSession, get_owned_deck
from memogarden.learning_engine.health.service import maybe_sync_user_health
from memogarden.learning_engine.health.states import to_health_state
from memogarden.learning_engine.stats.service import get_remaining, get_statistics
from memogarden.schemas.health import HealthSyncResponse
from memogarden.schemas.statistics import (
    DailyCountResponse,
    MaturityCountResponse,
    RemainingResponse,
    StatisticsResponse,
)

router = APIRouter()


# ============================================================================
# POST /v1/accounts/{account_id}/health/sync
# ============================================================================


@router.post("/{account_id}/health/sync", response_model=HealthSyncResponse)
def sync_health(account: CurrentAccount, db: DbSession):
    """
    Lazy health sync, meant to be called on page load.

    Runs a full resync at most once per local day. `synced` tells the client
    whether cached health values changed.
    """
    synced = maybe_sync_user_health(db, account.id)
    if synced:
        db.commit()
        db.refresh(account)
    return HealthSyncResponse(
        synced=synced,
        retrievability=account.retrievability,
        health=to_health_state(account.retrievability),
    )


# ============================================================================
# GET /v1/accounts/{account_id}/statistics
# ============================================================================


@router.get("/{account_id}/statistics", response_model=StatisticsResponse)
def read_statistics(
    account: CurrentAccount,
    db: DbSession,
    deck_id: Optional[UUID] = Query(default=None, description="Limit to one deck"),
):
    """Card and review counts, review history, due forecast and maturities."""
    if deck_id is not None:
        get_owned_deck(db, account, deck_id)

    stats = get_statistics(db, account, datetime.now(UTC), deck_id)
    return StatisticsResponse(
        cards=stats.cards,
        reviews=stats.reviews,
        retrospection=[DailyCountResponse(date=d.date, count=d.count) for d in stats.retrospection],
        prediction=[DailyCountResponse(date=d.date, count=d.count) for d in stats.prediction],
        maturities=[
            MaturityCountResponse(maturity=maturity.name.lower(), cards=cards)
            for maturity, cards in stats.maturities.items()
        ],
    )


# ============================================================================
# GET /v1/accounts/{account_id}/remaining
# ============================================================================


@router.get("/{account_id}/remaining", response_model=RemainingResponse)
def read_remaining(
    account: CurrentAccount,
    db: DbSession,
    deck_id: Optional[UUID] = Query(default=None, description="Limit to one deck"),
):
    """Cards due right now, by kind."""
    if deck_id is not None:
        get_owned_deck(db, account, deck_id)

    remaining = get_remaining(db, account.id, datetime.now(UTC), deck_id)
    return RemainingResponse(new=remaining.new, learning=remaining.learning, review=remaining.review)
