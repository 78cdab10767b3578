# db/engine.py
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from api.app.config import get_settings
from models import Base

_engine: AsyncEngine | None = None


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    # SQLite pools take no sizing arguments.
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo)
    return create_async_engine(
        database_url,
        pool_size=10,
        max_overflow=20,
        echo=echo,
    )


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(settings.database_url, echo=settings.database_echo)
    return _engine


async def init_models(engine: AsyncEngine) -> None:
    """Create any missing tables. Embedded SQLite installs use this instead of Alembic."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
