"""API v1 router - includes all v1 endpoints."""

from fastapi import APIRouter

from memogarden.api.v1.endpoints import accounts, cards, decks

api_router = APIRouter()

api_router.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])
api_router.include_router(cards.router, prefix="/accounts", tags=["Cards"])
api_router.include_router(decks.router, prefix="/accounts", tags=["Decks"])
