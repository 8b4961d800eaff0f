"""Process-wide async engine and session factory for the document store.

Both are built on first use so importing ``awv_db`` never opens a
connection.  The FastAPI lifespan calls ``dispose_engine()`` on shutdown;
the next ``get_engine()`` after that builds a fresh pool.
"""

import os

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from awv_db.config import get_async_url

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _pool_options() -> dict[str, int]:
    return {
        "pool_size": int(os.getenv("PG_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("PG_MAX_OVERFLOW", "10")),
    }


def get_engine() -> AsyncEngine:
    """The shared asyncpg engine."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(get_async_url(), **_pool_options())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Sessions bound to the shared engine; objects stay usable after commit."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    """Close the pool and forget the engine and its session factory."""
    global _engine, _session_factory
    engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        await engine.dispose()
