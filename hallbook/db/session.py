"""Database session management."""
import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from hallbook.config.settings import settings
from hallbook.core.logging import get_logger

logger = get_logger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; pool sizing only applies to server databases."""
    kwargs = {"pool_pre_ping": True, "echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs["pool_size"] = settings.DB_POOL_SIZE
        kwargs["max_overflow"] = settings.DB_POOL_OVERFLOW
        kwargs["pool_recycle"] = 3600
    return create_engine(database_url, **kwargs)


engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@event.listens_for(Engine, "before_cursor_execute")
def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    conn.info.setdefault('query_start_time', []).append(time.time())


@event.listens_for(Engine, "after_cursor_execute")
def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    total_time = time.time() - conn.info['query_start_time'].pop()
    if total_time > 0.5:
        logger.warning(f"Slow query detected ({total_time:.4f}s): {statement[:100]}...")
