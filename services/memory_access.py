# services/memory_access.py
"""
Access bookkeeping for surfaced memories (recency and frequency).
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from models.memory import Memory
from services.memory_store import MemoryStore

logger = logging.getLogger(__name__)


async def touch_memories(store: MemoryStore, memories: Iterable[Memory]) -> int:
    """Touch each memory once for a single retrieval event. Returns how many were touched."""
    touched = 0
    for memory in memories:
        await store.touch(memory)
        touched += 1
    if touched:
        logger.debug("Recorded access for %d memories", touched)
    return touched
