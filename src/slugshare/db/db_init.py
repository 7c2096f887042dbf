"""Database initialization helpers."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..files.files_models import MediaKind, RegisterOutcome
from ..files.files_repository import FileRepository
from .db_models import Base

DEMO_FILE = {
    "slug": "testvideo1",
    "media_handle": "BAACAgUAAxkBAAFB_0RpiGfUbmP3qEmL5Ow7yXm3XepUmAACCxwAAmngSVR8hHWXDZZRIToE",
    "media_kind": MediaKind.VIDEO,
    "caption": "Id:2001",
}


def create_engine_and_sessions(
    database_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(database_url, future=True)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return engine, session_factory


async def init_db(
    engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
    *,
    seed_demo: bool = True,
) -> RegisterOutcome | None:
    """Create the ``files`` table if absent and optionally seed the demo slug."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if not seed_demo:
        return None
    return await FileRepository(session_factory).register(**DEMO_FILE)


__all__ = ["DEMO_FILE", "create_engine_and_sessions", "init_db"]
