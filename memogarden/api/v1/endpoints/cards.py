"""
Card endpoints. Every mutation resyncs health before the commit.

Memory model rejections surface as MemoryModelError and are rendered as
422 REVIEW_REJECTED by the shared exception handler.
"""

from datetime import UTC, datetime
from uuid import UUID

from fastapi import APIRouter, Response, status

from memogarden.core.app_exceptions import AppError
from memogarden.core.dependencies import (
    CurrentAccount,
    DbSession,
    Model,
    get_owned_card,
    get_owned_deck,
)
from memogarden.learning_engine.constants import CardState, ReviewRating
from memogarden.learning_engine.health.service import (
    create_card,
    edit_card,
    memory_state,
    remove_card,
    review_card,
)
from memogarden.learning_engine.health.states import to_health_state
from memogarden.learning_engine.stats.maturity import get_card_maturity
from memogarden.models import Card
from memogarden.schemas.cards import (
    CardCreateRequest,
    CardResponse,
    CardUpdateRequest,
    ReviewPreviewResponse,
    ReviewRequest,
    ReviewResponse,
)

router = APIRouter()


def to_card_response(card: Card) -> CardResponse:
    return CardResponse(
        id=card.id,
        deck_id=card.deck_id,
        front=card.front,
        back=card.back,
        state=CardState(card.state),
        due=card.due,
        stability=card.stability,
        difficulty=card.difficulty,
        scheduled_days=card.scheduled_days,
        reps=card.reps,
        lapses=card.lapses,
        last_review=card.last_review,
        retrievability=card.retrievability,
        maturity=get_card_maturity(CardState(card.state), card.scheduled_days),
        health=to_health_state(card.retrievability),
        created_at=card.created_at,
        updated_at=card.updated_at,
    )


@router.post(
    "/{account_id}/cards", response_model=CardResponse, status_code=status.HTTP_201_CREATED
)
def post_card(body: CardCreateRequest, account: CurrentAccount, db: DbSession):
    """Create a card in one of the account's decks."""
    deck = get_owned_deck(db, account, body.deck_id)
    card = create_card(db, deck.id, body.front, body.back)
    db.commit()
    return to_card_response(card)


@router.patch("/{account_id}/cards/{card_id}", response_model=CardResponse)
def patch_card(card_id: UUID, body: CardUpdateRequest, account: CurrentAccount, db: DbSession):
    """Edit a card. Setting `deck_id` moves it to another deck of the account."""
    card = get_owned_card(db, account, card_id)
    if body.deck_id is not None:
        get_owned_deck(db, account, body.deck_id)

    card = edit_card(db, card.id, front=body.front, back=body.back, deck_id=body.deck_id)
    db.commit()
    return to_card_response(card)


@router.delete("/{account_id}/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_card(card_id: UUID, account: CurrentAccount, db: DbSession):
    """Soft-delete a card. Its reviews still count in statistics."""
    card = get_owned_card(db, account, card_id)
    remove_card(db, card.id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{account_id}/cards/{card_id}/review", response_model=ReviewResponse)
def post_review(
    card_id: UUID, body: ReviewRequest, account: CurrentAccount, db: DbSession, model: Model
):
    """
    Review a due card.

    Returns 409 NOT_DUE if the card is not due yet, and 422 REVIEW_REJECTED if
    the memory model could not process the review. Neither changes anything.
    """
    card = get_owned_card(db, account, card_id)
    review_log = review_card(
        db, card.id, body.rating, body.answer, now=datetime.now(UTC), memory_model=model
    )
    if review_log is None:
        raise AppError(
            status_code=status.HTTP_409_CONFLICT,
            code="NOT_DUE",
            message="Card is not due for review",
            details={"due": card.due.isoformat()},
        )

    db.commit()
    return ReviewResponse(
        card=to_card_response(card),
        reviewed_at=review_log.review,
        rating=ReviewRating(review_log.rating),
    )


@router.get("/{account_id}/cards/{card_id}/preview", response_model=ReviewPreviewResponse)
def get_review_preview(card_id: UUID, account: CurrentAccount, db: DbSession, model: Model):
    """Due date each rating would give the card if reviewed now."""
    card = get_owned_card(db, account, card_id)
    dues = model.preview(memory_state(card), datetime.now(UTC))
    return ReviewPreviewResponse(
        again=dues[ReviewRating.AGAIN],
        hard=dues[ReviewRating.HARD],
        good=dues[ReviewRating.GOOD],
        easy=dues[ReviewRating.EASY],
    )
