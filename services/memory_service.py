# services/memory_service.py
"""
Memory service: the composed retrieve → format → track path used by
prompt assembly.
"""
from __future__ import annotations

import logging

from ai.memory_context import build_context
from api.app.config import get_settings
from services.errors import StorageError
from services.memory_access import touch_memories
from services.memory_retrieval import retrieve_relevant_memories
from services.memory_store import MemoryStore

logger = logging.getLogger(__name__)


async def build_memory_context(
    store: MemoryStore,
    query_text: str,
    limit: int | None = None,
    track_access: bool | None = None,
) -> str:
    """
    Build the memory block for one conversational turn.

    Returns "" when no memory qualifies. Retrieval failures propagate as
    StorageError; failing to record access does not.
    """
    settings = get_settings()
    if limit is None:
        limit = settings.memory_context_limit
    if track_access is None:
        track_access = settings.track_memory_access

    memories = await retrieve_relevant_memories(store, query_text, limit=limit)
    context = build_context(memories)

    if track_access and memories:
        try:
            await touch_memories(store, memories)
        except StorageError as exc:
            logger.warning("Memory access tracking failed: %s", exc)

    logger.info("Memory context: %d memories, %d chars", len(memories), len(context))
    return context
