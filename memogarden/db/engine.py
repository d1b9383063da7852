"""Database engine configuration."""

import math

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from memogarden.core.config import settings


def _register_sqlite_functions(dbapi_connection, connection_record) -> None:
    # SQLite builds without the math extension have no power()
    dbapi_connection.create_function("power", 2, math.pow, deterministic=True)


def create_db_engine(database_url: str | None = None) -> Engine:
    """Create SQLAlchemy engine."""
    url = database_url or settings.DATABASE_URL

    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.DB_ECHO,
        )
        event.listen(engine, "connect", _register_sqlite_functions)
        return engine

    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,
        max_overflow=10,
        echo=settings.DB_ECHO,
    )


# Global engine instance
engine = create_db_engine()
