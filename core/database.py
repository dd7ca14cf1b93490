"""
Database engine and session factory.

The engine (and its connection pool) is created once per process, on first
use, and disposed when the application shuts down.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from core.config import settings
from utils.logger import get_logger

logger = get_logger(__name__)

Base = declarative_base()

SessionLocal = sessionmaker(autocommit=False, autoflush=False)

_engine: Engine | None = None


def get_engine() -> Engine:
    global _engine

    if _engine is None:
        kwargs = {"pool_pre_ping": True}
        if settings.DATABASE_URL.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs["pool_size"] = settings.DB_POOL_SIZE

        _engine = create_engine(settings.DATABASE_URL, **kwargs)
        SessionLocal.configure(bind=_engine)

        logger.info(
            "Database engine created",
            extra={"dialect": _engine.dialect.name, "pool_size": settings.DB_POOL_SIZE}
        )

    return _engine


def dispose_engine():
    """Close every pooled connection. Safe to call when no engine exists."""
    global _engine

    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Database engine disposed")


def init_db():
    """Create any missing tables. Existing tables are left as they are."""
    import models  # noqa: F401  registers every table on Base.metadata

    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables verified", extra={"tables": len(Base.metadata.tables)})
