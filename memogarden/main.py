"""FastAPI application factory and main entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from memogarden import __version__
from memogarden.api.v1.router import api_router
from memogarden.core.config import settings
from memogarden.core.errors import register_exception_handlers
from memogarden.core.logging import setup_logging
from memogarden.db.base import Base
from memogarden.db.engine import engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Deployed schemas are managed outside the app
    if settings.ENV in ("dev", "test"):
        import memogarden.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.PROJECT_NAME} {__version__} started (env={settings.ENV})")
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    docs_enabled = settings.ENV != "prod"
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=__version__,
        description="Garden health sync and review statistics for spaced repetition decks",
        openapi_url="/openapi.json" if docs_enabled else None,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/", tags=["Root"])
    async def root():
        return {"name": settings.PROJECT_NAME, "version": __version__, "api": settings.API_PREFIX}

    return app


app = create_app()
