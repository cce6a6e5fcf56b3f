"""Database engine, session factory, and declarative base.

One session dependency for FastAPI:
  - get_db()  → yields an AsyncSession, commits on success, rolls back on error

Cache patterns marked stale during the request are invalidated only
after the commit succeeds; a rollback drops them.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase, Session

from app.config import settings
from app.utils.cache import STALE_PATTERNS_KEY, flush_stale


def _engine_kwargs(url: str) -> dict:
    # SQLite (tests, local dev) has no connection pool sizing
    if url.startswith("sqlite"):
        return {}
    return {"pool_size": 20, "max_overflow": 10}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug and settings.environment == "development",
    **_engine_kwargs(settings.database_url),
)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


@event.listens_for(Session, "after_rollback")
def _drop_stale_patterns(session: Session) -> None:
    session.info.pop(STALE_PATTERNS_KEY, None)


# ── Base class ──────────────────────────────────────────────

class Base(DeclarativeBase):
    """Declarative base for every Brymar table."""
    pass


# ── Session dependency ──────────────────────────────────────

async def get_db() -> AsyncSession:
    """Yield a session; commit when the request handler returns."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        await flush_stale(session)
