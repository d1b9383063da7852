"""Pydantic schemas for statistics."""

from datetime import datetime

from pydantic import BaseModel, Field


class DailyCountResponse(BaseModel):
    date: datetime = Field(..., description="Start of the local day, as a UTC instant")
    count: int


class MaturityCountResponse(BaseModel):
    maturity: str
    cards: int


class StatisticsResponse(BaseModel):
    """Collection or deck statistics."""

    cards: int = Field(..., description="Active cards")
    reviews: int = Field(..., description="Reviews ever done, deleted cards included")
    retrospection: list[DailyCountResponse] = Field(..., description="Reviews per day, oldest first")
    prediction: list[DailyCountResponse] = Field(
        ..., description="Due cards per day from today, overdue cards counted today"
    )
    maturities: list[MaturityCountResponse]


class RemainingResponse(BaseModel):
    """Cards due right now."""

    new: int
    learning: int
    review: int
