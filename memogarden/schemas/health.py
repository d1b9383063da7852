"""Pydantic schemas for health synchronization."""

from typing import Optional

from pydantic import BaseModel, Field

from memogarden.learning_engine.constants import HealthState


class HealthSyncResponse(BaseModel):
    """Result of the lazy health sync."""

    synced: bool = Field(..., description="Whether a full resync ran, callers should re-read data")
    retrievability: Optional[float] = Field(None, ge=0, le=1)
    health: HealthState
