"""Database engine, session factory and declarative base.

The audit store owns a single table (`audit_logs`), so there is one
DeclarativeBase and one session factory. The log store opens its own
short-lived sessions from the factory so a log write never shares a
transaction with the caller.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from auditchain.config import settings


def make_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """Create an async engine for the given URL (defaults to settings)."""
    url = url or settings.database_url
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.debug, **kwargs)
    return create_async_engine(
        url,
        echo=settings.debug,
        pool_size=20,
        max_overflow=10,
        pool_pre_ping=True,
        **kwargs,
    )


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = make_engine()

async_session = make_session_factory(engine)


# ── Base class ──────────────────────────────────────────────

class Base(DeclarativeBase):
    pass

