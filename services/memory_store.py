# services/memory_store.py
"""
Memory store: durable CRUD and predicate queries over memory records.

Every mutation runs in its own short transaction and is committed before
the call returns. Mutations on one store are serialized through a lock, so
at most one write is in flight at a time. Database failures surface as
StorageError instead of being dropped.
"""
from __future__ import annotations

import asyncio
import logging
import math
import uuid
from collections.abc import AsyncIterator, Callable, Iterable, Mapping, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models.base import utcnow
from models.memory import Memory, MemorySource, MemoryType
from services.errors import MemoryNotFoundError, StorageError
from services.observability import log_event

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "updated_at": Memory.updated_at,
    "created_at": Memory.created_at,
    "last_accessed_at": Memory.last_accessed_at,
    "access_count": Memory.access_count,
    "confidence": Memory.confidence,
}


def clamp_confidence(value: float) -> float:
    return max(0.0, min(1.0, value))


def _clean_content(content: str) -> str:
    cleaned = (content or "").strip()
    if not cleaned:
        raise ValueError("Memory content must not be empty")
    return cleaned


def _clean_category(category: str | None) -> str | None:
    if category is None:
        return None
    return category.strip() or None


def _copy_state(source: Memory, target: Memory, fields: Iterable[str]) -> None:
    for name in fields:
        setattr(target, name, getattr(source, name))


class MemoryStore:
    """Persistence for memories, bound to one database via its session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session_factory = session_factory
        self._clock = clock
        self._write_lock = asyncio.Lock()

    # ── sessions ──

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Memory storage failure: %s", exc)
            raise StorageError(f"Memory storage failed: {exc}") from exc

    @asynccontextmanager
    async def _write(self) -> AsyncIterator[AsyncSession]:
        async with self._write_lock:
            async with self._session() as session:
                yield session

    @staticmethod
    async def _load(session: AsyncSession, memory_id: uuid.UUID) -> Memory:
        row = await session.get(Memory, memory_id)
        if row is None:
            raise MemoryNotFoundError(memory_id)
        return row

    # ── inserts ──

    async def insert_explicit(
        self,
        type: MemoryType,
        content: str,
        category: str | None = None,
    ) -> Memory:
        """Store something the user told us directly. Confidence is always 1.0."""
        memory = Memory.create(
            MemoryType(type),
            _clean_content(content),
            source=MemorySource.EXPLICIT,
            category=_clean_category(category),
            now=self._clock(),
        )
        async with self._write() as session:
            session.add(memory)
            await session.commit()

        logger.info("Stored explicit %s memory %s", memory.type.value, memory.id)
        return memory

    def _build_inferred(
        self,
        type: MemoryType,
        content: str,
        confidence: float,
        category: str | None = None,
        source_session_id: uuid.UUID | None = None,
        source_message_id: uuid.UUID | None = None,
    ) -> tuple[Memory, float]:
        requested = float(confidence)
        if math.isnan(requested):
            raise ValueError("Memory confidence must be a number")

        memory = Memory.create(
            MemoryType(type),
            _clean_content(content),
            source=MemorySource.INFERRED,
            confidence=clamp_confidence(requested),
            category=_clean_category(category),
            now=self._clock(),
            source_session_id=source_session_id,
            source_message_id=source_message_id,
        )
        return memory, requested

    @staticmethod
    def _stage_inferred(session: AsyncSession, memory: Memory, requested: float) -> None:
        session.add(memory)
        if memory.confidence != requested:
            log_event(
                session,
                "confidence_clamped",
                "warning",
                memory_id=memory.id,
                message="Inferred memory confidence outside [0, 1]",
                metadata={"requested": requested, "stored": memory.confidence},
            )

    async def insert_inferred(
        self,
        type: MemoryType,
        content: str,
        confidence: float,
        category: str | None = None,
        source_session_id: uuid.UUID | None = None,
        source_message_id: uuid.UUID | None = None,
    ) -> Memory:
        """
        Store a memory derived from a conversation.

        Out-of-range confidence is clamped into [0, 1] and the clamp is
        recorded as a ``confidence_clamped`` event.
        """
        memory, requested = self._build_inferred(
            type,
            content,
            confidence,
            category=category,
            source_session_id=source_session_id,
            source_message_id=source_message_id,
        )
        async with self._write() as session:
            self._stage_inferred(session, memory, requested)
            await session.commit()

        logger.info(
            "Stored inferred %s memory %s (confidence=%.2f)",
            memory.type.value,
            memory.id,
            memory.confidence,
        )
        return memory

    async def insert_inferred_batch(self, items: Sequence[Mapping[str, Any]]) -> list[Memory]:
        """
        Store several inferred memories in one transaction.

        Each item holds the keyword arguments of ``insert_inferred``. Every
        item is checked before anything is written, and a failure leaves
        none of the batch behind.
        """
        built = [self._build_inferred(**item) for item in items]
        if not built:
            return []

        async with self._write() as session:
            for memory, requested in built:
                self._stage_inferred(session, memory, requested)
            await session.commit()

        logger.info("Stored %d inferred memories", len(built))
        return [memory for memory, _ in built]

    async def insert_correction(self, original: Memory, content: str) -> Memory:
        """
        Replace a memory with the user's corrected version.

        The original is soft-deleted and the replacement, linked back to it,
        is stored with full confidence. Both writes share one transaction.
        Only an active memory can be corrected.
        """
        content = _clean_content(content)
        async with self._write() as session:
            row = await self._load(session, original.id)
            if not row.is_active:
                raise ValueError(f"Memory {row.id} is inactive and cannot be corrected")
            now = self._clock()

            correction = Memory.create(
                row.type,
                content,
                source=MemorySource.CORRECTED,
                category=row.category,
                now=now,
                related_memory_ids=[str(row.id)],
            )
            row.is_active = False
            row.updated_at = now
            session.add(correction)
            log_event(
                session,
                "memory_corrected",
                memory_id=row.id,
                metadata={"correction_id": str(correction.id)},
            )
            await session.commit()
            _copy_state(row, original, ("is_active", "updated_at"))

        return correction

    # ── mutations ──

    async def update(
        self,
        memory: Memory,
        content: str | None = None,
        is_active: bool | None = None,
    ) -> Memory:
        """Edit content and/or the active flag. ``updated_at`` is always refreshed."""
        if content is not None:
            content = _clean_content(content)

        async with self._write() as session:
            row = await self._load(session, memory.id)
            if content is not None:
                row.content = content
            if is_active is not None:
                row.is_active = is_active
            row.updated_at = self._clock()
            await session.commit()
            _copy_state(row, memory, ("content", "is_active", "updated_at"))

        return memory

    async def delete(self, memory: Memory) -> None:
        """Permanently remove a memory. Prefer ``update(is_active=False)`` for undoable removal."""
        async with self._write() as session:
            row = await self._load(session, memory.id)
            await session.delete(row)
            log_event(
                session,
                "memory_deleted",
                memory_id=row.id,
                metadata={"type": row.type.value, "source": row.source.value},
            )
            await session.commit()

    async def touch(self, memory: Memory) -> Memory:
        """Record that a memory was surfaced to a conversation."""
        async with self._write() as session:
            row = await self._load(session, memory.id)
            row.last_accessed_at = self._clock()
            row.access_count += 1
            await session.commit()
            _copy_state(row, memory, ("last_accessed_at", "access_count"))

        return memory

    # ── reads ──

    async def get(self, memory_id: uuid.UUID) -> Memory | None:
        async with self._session() as session:
            return await session.get(Memory, memory_id)

    async def query(
        self,
        *,
        active_only: bool = True,
        confidence_above: float | None = None,
        types: Iterable[MemoryType] | None = None,
        order_by: str = "updated_at",
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Memory]:
        """
        Return memories matching every given filter.

        ``confidence_above`` is strict. Results are totally ordered: the sort
        field first, then ``created_at``, then ``id``.
        """
        sort_column = SORT_FIELDS.get(order_by)
        if sort_column is None:
            raise ValueError(f"Unknown sort field: {order_by}")
        if limit is not None and limit <= 0:
            return []

        stmt = select(Memory)
        if active_only:
            stmt = stmt.where(Memory.is_active.is_(True))
        if confidence_above is not None:
            stmt = stmt.where(Memory.confidence > confidence_above)
        if types is not None:
            stmt = stmt.where(Memory.type.in_([MemoryType(t) for t in types]))

        if descending:
            stmt = stmt.order_by(sort_column.desc().nulls_last(), Memory.created_at.desc(), Memory.id)
        else:
            stmt = stmt.order_by(sort_column.asc().nulls_last(), Memory.created_at.asc(), Memory.id)
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def search(
        self,
        text: str,
        types: Iterable[MemoryType] | None = None,
        include_inactive: bool = False,
    ) -> list[Memory]:
        """Case-insensitive substring search over content, newest first."""
        needle = (text or "").strip()

        stmt = select(Memory)
        if not include_inactive:
            stmt = stmt.where(Memory.is_active.is_(True))
        if types is not None:
            stmt = stmt.where(Memory.type.in_([MemoryType(t) for t in types]))
        if needle:
            stmt = stmt.where(Memory.content.icontains(needle, autoescape=True))
        stmt = stmt.order_by(Memory.created_at.desc(), Memory.id)

        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def count_by_type(self, include_inactive: bool = False) -> dict[MemoryType, int]:
        stmt = select(Memory.type, func.count(Memory.id)).group_by(Memory.type)
        if not include_inactive:
            stmt = stmt.where(Memory.is_active.is_(True))

        async with self._session() as session:
            rows = (await session.execute(stmt)).all()

        counts = {memory_type: 0 for memory_type in MemoryType}
        for memory_type, count in rows:
            counts[MemoryType(memory_type)] = count
        return counts
