"""Pydantic schemas for cards and reviews."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from memogarden.learning_engine.constants import (
    CardMaturity,
    CardState,
    HealthState,
    ReviewRating,
)


# ============================================================================
# Card Schemas
# ============================================================================


class CardCreateRequest(BaseModel):
    deck_id: UUID
    front: str = Field(..., min_length=1, max_length=300)
    back: str = Field(..., min_length=1, max_length=1000)


class CardUpdateRequest(BaseModel):
    """Partial card edit. Setting deck_id moves the card."""

    deck_id: Optional[UUID] = None
    front: Optional[str] = Field(None, min_length=1, max_length=300)
    back: Optional[str] = Field(None, min_length=1, max_length=1000)


class CardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    deck_id: UUID
    front: str
    back: str
    state: CardState
    due: datetime
    stability: float
    difficulty: float
    scheduled_days: int
    reps: int
    lapses: int
    last_review: Optional[datetime]
    retrievability: Optional[float]
    maturity: CardMaturity
    health: HealthState
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Review Schemas
# ============================================================================


class ReviewRequest(BaseModel):
    rating: ReviewRating = Field(..., description="1=Again, 2=Hard, 3=Good, 4=Easy")
    answer: str = Field("", max_length=1000, description="User's attempt at the back")


class ReviewResponse(BaseModel):
    """Card after the review, with the logged review instant."""

    card: CardResponse
    reviewed_at: datetime
    rating: ReviewRating


class ReviewPreviewResponse(BaseModel):
    """Due instant each rating would produce."""

    again: datetime
    hard: datetime
    good: datetime
    easy: datetime
