# tests/test_memory_retrieval.py
"""
Tests for the retrieval policy: eligibility, ordering, and browse listings.
"""
from __future__ import annotations

import pytest

from models.memory import MemoryType
from services.memory_retrieval import CONFIDENCE_THRESHOLD, get_all_memories, retrieve_relevant_memories


@pytest.mark.asyncio
async def test_empty_store_returns_empty_list(store):
    assert await retrieve_relevant_memories(store, "anything") == []
    assert await get_all_memories(store) == []


@pytest.mark.asyncio
async def test_threshold_is_strict(store):
    assert CONFIDENCE_THRESHOLD == 0.7
    await store.insert_inferred(MemoryType.FACT, "exactly at threshold", 0.7)
    above = await store.insert_inferred(MemoryType.FACT, "just above threshold", 0.71)

    result = await retrieve_relevant_memories(store, "anything")
    assert [m.id for m in result] == [above.id]


@pytest.mark.asyncio
async def test_low_confidence_inferred_memory_is_not_retrieved(store):
    await store.insert_inferred(MemoryType.PREFERENCE, "Might like jazz", 0.5)

    assert await retrieve_relevant_memories(store, "music") == []


@pytest.mark.asyncio
async def test_inactive_memories_are_excluded(store):
    memory = await store.insert_explicit(MemoryType.GOAL, "Learn Spanish")
    await store.update(memory, is_active=False)

    assert await retrieve_relevant_memories(store, "goals") == []
    assert await get_all_memories(store) == []

    everything = await get_all_memories(store, include_inactive=True)
    assert len(everything) == 1
    assert everything[0].id == memory.id
    assert everything[0].is_active is False


@pytest.mark.asyncio
async def test_type_filter_wins_over_confidence_and_recency(store):
    fact = await store.insert_inferred(MemoryType.FACT, "Works night shifts", 0.75)
    await store.insert_explicit(MemoryType.PREFERENCE, "Loves hiking")
    await store.insert_explicit(MemoryType.PREFERENCE, "Prefers tea")

    result = await retrieve_relevant_memories(store, "anything", types={MemoryType.FACT})
    assert [m.id for m in result] == [fact.id]


@pytest.mark.asyncio
async def test_most_recently_updated_first_and_limited(store):
    memories = [await store.insert_explicit(MemoryType.FACT, f"fact {i}") for i in range(5)]
    await store.update(memories[0], content="fact 0, revised")

    result = await retrieve_relevant_memories(store, "anything", limit=3)
    assert [m.content for m in result] == ["fact 0, revised", "fact 4", "fact 3"]


@pytest.mark.asyncio
async def test_query_text_does_not_change_selection(store):
    await store.insert_explicit(MemoryType.FACT, "Lives in Seattle")
    await store.insert_explicit(MemoryType.PREFERENCE, "Loves hiking")

    about_seattle = await retrieve_relevant_memories(store, "Seattle")
    about_nothing = await retrieve_relevant_memories(store, "")
    assert [m.id for m in about_seattle] == [m.id for m in about_nothing]
    assert len(about_seattle) == 2


@pytest.mark.asyncio
async def test_get_all_ignores_confidence_and_sorts_by_creation(store):
    low = await store.insert_inferred(MemoryType.MOOD, "Sometimes restless", 0.3)
    high = await store.insert_explicit(MemoryType.FACT, "Lives in Seattle")
    await store.update(low, content="Sometimes restless at night")

    result = await get_all_memories(store)
    assert [m.id for m in result] == [high.id, low.id]

    moods = await get_all_memories(store, types=[MemoryType.MOOD])
    assert [m.id for m in moods] == [low.id]
