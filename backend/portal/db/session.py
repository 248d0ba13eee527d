"""
Async SQLAlchemy engine and session helpers.

`session_scope()` is the single unit of work: commit on success, roll
back on any exception.  The API `get_db` dependency and the seed
script both go through it.  Work that must only happen once the data
is durable (queueing e-mails) is registered with `after_commit()`.
"""

from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from portal.core.config import settings

_AFTER_COMMIT = "after_commit"


def make_engine(url: str) -> AsyncEngine:
    """Async engine for `url`; pool sizing only applies to server databases."""
    kwargs = {"echo": settings.APP_ENV == "development" and settings.SQL_ECHO}
    if not url.startswith("sqlite"):
        kwargs.update(pool_size=20, max_overflow=10, pool_pre_ping=True)
    return create_async_engine(url, **kwargs)


engine = make_engine(settings.DATABASE_URL)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def after_commit(session: AsyncSession, callback: Callable[[], Awaitable[None]]) -> None:
    """Run `callback` after `session_scope` commits `session`; dropped on rollback."""
    session.info.setdefault(_AFTER_COMMIT, []).append(callback)


@asynccontextmanager
async def session_scope(factory: async_sessionmaker[AsyncSession] = async_session):
    """Yield a session and commit it, or roll back if the block raises."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            session.info.pop(_AFTER_COMMIT, None)
            await session.rollback()
            raise
        for callback in session.info.pop(_AFTER_COMMIT, []):
            await callback()
