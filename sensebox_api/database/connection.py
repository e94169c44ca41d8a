"""
Database connection and transaction management
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
import structlog

from sensebox_api.core.config import settings
from sensebox_api.core.errors import BoxApiError, ConflictError, StoreError

logger = structlog.get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_database_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL.

    In-memory SQLite shares a single connection so every transaction sees
    the same database.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
        bind = create_engine(database_url, echo=echo, **kwargs)
        event.listen(bind, "connect", _enable_sqlite_foreign_keys)
        return bind

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=300,
        echo=echo
    )


# Create database engine
engine = create_database_engine(settings.database_url, echo=settings.debug)

# Create base class for models
Base = declarative_base()


def get_engine() -> Engine:
    """FastAPI dependency returning the shared engine"""
    return engine


@contextmanager
def transaction(bind: Engine) -> Iterator[Connection]:
    """Run a unit of work inside one transaction.

    Commits when the block exits normally. Any exception rolls the
    transaction back before it propagates; database exceptions are
    translated into ``StoreError``/``ConflictError``.
    """
    try:
        with bind.begin() as conn:
            yield conn
    except BoxApiError as e:
        logger.warning("Transaction rolled back", error_kind=type(e).__name__, error=e.message)
        raise
    except IntegrityError as e:
        logger.warning("Transaction rolled back", error_kind="ConflictError", error=str(e.orig))
        raise ConflictError(detail=str(e.orig)) from e
    except SQLAlchemyError as e:
        logger.error("Transaction rolled back", error_kind="StoreError", error=str(e))
        raise StoreError(detail=str(e)) from e


def init_database(bind: Optional[Engine] = None):
    """Initialize database tables"""
    bind = bind if bind is not None else engine
    try:
        # Import all models to ensure they are registered
        from sensebox_api.models import device, sensor, measurement  # noqa

        # Create all tables
        Base.metadata.create_all(bind=bind)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise
