"""Async SQLAlchemy plumbing for the direct SQL store.

The engine and session factory are built on first use from
`settings.database_url`, so a REST-only deployment never opens a database
connection.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from stockdash.config import settings
from stockdash.infra.logging import get_logger

logger = get_logger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(url: str) -> dict[str, Any]:
    """Engine keyword arguments for a database URL.

    Pool sizing only applies to server databases; SQLite uses its own pool.
    """
    options: dict[str, Any] = {"echo": settings.debug}
    if make_url(url).get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_pool_max_overflow,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
    return options


def get_engine() -> AsyncEngine:
    """Get or create the async engine for `settings.database_url`."""
    global _engine

    if _engine is None:
        url = settings.database_url
        options = engine_options(url)
        logger.info(
            "Creating database engine",
            backend=make_url(url).get_backend_name(),
            pool_size=options.get("pool_size"),
        )
        _engine = create_async_engine(url, **options)

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory bound to the global engine."""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    return _session_factory


@asynccontextmanager
async def get_db_session(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session that commits on clean exit and rolls back on error.

    Args:
        factory: Session factory to use (defaults to the global one)

    Example:
        async with get_db_session() as session:
            session.add(StockHistory(item_id=item_id, action="added"))
    """
    session = (factory or get_session_factory())()

    try:
        yield session
        await session.commit()

    except Exception as e:
        await session.rollback()
        logger.error("Database session rolled back", error=str(e), error_type=type(e).__name__)
        raise

    finally:
        await session.close()


async def close_db_engine() -> None:
    """Dispose the global engine and forget the session factory."""
    global _engine, _session_factory

    if _engine is not None:
        logger.info("Closing database engine")
        await _engine.dispose()
        _engine = None
        _session_factory = None
