# services/memory_retrieval.py
"""
Retrieval policy: which stored memories may shape the current turn.

Selection is recency over high-confidence active memories. The query text
is accepted so callers do not change when a relevance-ranked policy lands,
but it has no effect on the result today.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from models.memory import Memory, MemoryType
from services.memory_store import MemoryStore

logger = logging.getLogger(__name__)

# Strict: a memory at exactly this confidence is not eligible.
CONFIDENCE_THRESHOLD = 0.7
DEFAULT_LIMIT = 10


async def retrieve_relevant_memories(
    store: MemoryStore,
    query: str,
    types: Iterable[MemoryType] | None = None,
    limit: int = DEFAULT_LIMIT,
) -> list[Memory]:
    """Active memories above the confidence threshold, most recently updated first."""
    memories = await store.query(
        active_only=True,
        confidence_above=CONFIDENCE_THRESHOLD,
        types=types,
        order_by="updated_at",
        descending=True,
        limit=limit,
    )
    logger.debug("Retrieved %d memories for query of %d chars", len(memories), len(query or ""))
    return memories


async def get_all_memories(
    store: MemoryStore,
    types: Iterable[MemoryType] | None = None,
    include_inactive: bool = False,
) -> list[Memory]:
    """Browse listing: no confidence filter, newest first."""
    return await store.query(
        active_only=not include_inactive,
        types=types,
        order_by="created_at",
        descending=True,
    )
