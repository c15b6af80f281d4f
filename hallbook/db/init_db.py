"""Database initialization utilities."""
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from hallbook.core.logging import get_logger
from hallbook.models import Base

logger = get_logger(__name__)


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Create all tables that do not exist yet.

    Suitable for development and tests; production schemas are managed
    outside the application.
    """
    if bind is None:
        from hallbook.db.session import engine as bind

    existing_tables = inspect(bind).get_table_names()
    Base.metadata.create_all(bind=bind)
    logger.info(
        f"Database initialized ({len(existing_tables)} existing, "
        f"{len(Base.metadata.tables)} declared tables)"
    )


def drop_db(bind: Optional[Engine] = None) -> None:
    """Drop all tables. Development and tests only."""
    if bind is None:
        from hallbook.db.session import engine as bind

    Base.metadata.drop_all(bind=bind)
    logger.warning("All database tables dropped")
