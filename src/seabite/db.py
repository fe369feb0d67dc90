import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Union

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from seabite.core.config import config

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Build an engine for the given URL.

    SQLite (used by tests and local runs) gets a single shared connection so
    that an in-memory database is visible to every caller.
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        url,
        echo=echo,
        pool_size=config.database.pool_size,
        pool_recycle=config.database.pool_recycle,
        pool_pre_ping=True,
    )


@lru_cache()
def get_engine() -> Engine:
    return create_db_engine(config.database.url, echo=config.database.echo)


def init_db(engine: Engine) -> None:
    """Create the tables registered on Base.metadata."""
    # Registers the models with Base.metadata
    from seabite.models import storage  # noqa: F401

    Base.metadata.create_all(engine)


@dataclass
class PingResult:
    ok: bool
    error: Optional[str] = None


def ping_database(target: Union[str, Engine, None] = None) -> PingResult:
    """
    Connect, run SELECT 1 and close again.

    Never raises for connectivity problems; the failure is logged and
    returned so callers (health check, db_ping.py) can decide what to do.
    """
    owns_engine = isinstance(target, str)
    engine = None

    logger.info("Starting database ping")
    try:
        engine = create_db_engine(target) if owns_engine else (target or get_engine())
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database ping successful")
        return PingResult(ok=True)
    except SQLAlchemyError as e:
        logger.error(f"Database ping failed: {e}")
        return PingResult(ok=False, error=str(e))
    finally:
        if owns_engine and engine is not None:
            engine.dispose()
            logger.info("Connection closed")
