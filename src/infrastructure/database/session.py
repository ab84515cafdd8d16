"""Database session management."""

from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings


def _connect_args(url: str) -> dict[str, Any]:
    """Driver arguments for the configured database.

    Supabase's Supavisor pooler runs in transaction mode, which breaks
    asyncpg's prepared statement cache.
    """
    if url.startswith("sqlite"):
        return {}
    if "pooler.supabase.com" in url or "supabase.com" in url:
        return {"statement_cache_size": 0}
    return {}


_engine_kwargs: dict[str, Any] = {"echo": settings.debug}
if not settings.async_database_url.startswith("sqlite"):
    _engine_kwargs["pool_pre_ping"] = True

engine = create_async_engine(
    settings.async_database_url,
    connect_args=_connect_args(settings.async_database_url),
    **_engine_kwargs,
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session_factory() as session:
        yield session
