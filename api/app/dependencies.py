# api/app/dependencies.py
from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_db
from services.memory_store import MemoryStore


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_db():
        yield session


def get_memory_store(request: Request) -> MemoryStore:
    """The store built at startup; routes never construct their own."""
    return request.app.state.memory_store
