"""Database utility helpers."""

from __future__ import annotations

from sqlalchemy.engine import Engine

from customer_accounts.core.logging import get_logger
from customer_accounts.db.models import Base
from customer_accounts.db.session import engine as default_engine

logger = get_logger(__name__)


def create_tables(bind: Engine | None = None) -> None:
    """Create all tables on ``bind`` (safe to call repeatedly)."""
    bind = bind or default_engine
    Base.metadata.create_all(bind=bind)
    logger.info("Ensured tables exist: %s", ", ".join(sorted(Base.metadata.tables)))


def drop_tables(bind: Engine | None = None) -> None:
    """Drop all tables on ``bind``."""
    bind = bind or default_engine
    Base.metadata.drop_all(bind=bind)
    logger.info("Dropped tables: %s", ", ".join(sorted(Base.metadata.tables)))
