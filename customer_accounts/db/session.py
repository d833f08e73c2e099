"""Engine and session factory."""

from __future__ import annotations

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from customer_accounts.core.config import settings


def build_engine(database_url: str | None = None) -> Engine:
    """Create the engine for ``database_url`` (defaults to settings)."""
    url = database_url or settings.database_url
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=settings.db_echo,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        url,
        echo=settings.db_echo,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


engine = build_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """Yield a session per request and close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
