# tests/test_memory_context.py
"""Tests for context formatting, the composed memory context, and prompt assembly."""
from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from ai.memory_context import append_context, build_context
from ai.prompt_builder import build_system_prompt, load_base_prompt
from ai.prompts.system_journal import SYSTEM_JOURNAL
from db.engine import build_engine, init_models
from db.session import make_session_factory
from models.memory import Memory, MemoryType
from services.errors import StorageError
from services.memory_service import build_memory_context
from services.memory_store import MemoryStore


def _memory(memory_type: MemoryType, content: str) -> Memory:
    return Memory.create(memory_type, content)


# ── formatter ──


def test_empty_input_renders_nothing():
    assert build_context([]) == ""


def test_exact_rendering():
    memories = [
        _memory(MemoryType.PREFERENCE, "Loves hiking"),
        _memory(MemoryType.FACT, "Lives in Seattle"),
        _memory(MemoryType.PREFERENCE, "Prefers tea"),
    ]
    assert build_context(memories) == (
        "\n\n## What you know about the user:\n"
        "\n### Fact:\n"
        "- Lives in Seattle\n"
        "\n### Preference:\n"
        "- Loves hiking\n"
        "- Prefers tea\n"
    )


def test_groups_sorted_by_label_not_declaration_order():
    memories = [_memory(t, f"about {t.value}") for t in MemoryType]
    rendered = build_context(memories)

    headings = [line for line in rendered.splitlines() if line.startswith("### ")]
    assert headings == [
        "### Event:",
        "### Fact:",
        "### Goal:",
        "### Mood:",
        "### Preference:",
        "### Relationship:",
        "### Trait:",
    ]


def test_rendering_is_deterministic():
    memories = [
        _memory(MemoryType.MOOD, "Anxious on Mondays"),
        _memory(MemoryType.GOAL, "Run a marathon"),
        _memory(MemoryType.MOOD, "Calm after walks"),
    ]
    assert build_context(memories) == build_context(list(memories))


def test_append_context_keeps_base_prompt():
    assert append_context("  Be kind.\n", "\n\n## block") == "Be kind.\n\n## block"
    assert append_context("Be kind.", "") == "Be kind."


# ── composed context ──


@pytest.mark.asyncio
async def test_context_for_explicit_fact_and_preference(store):
    await store.insert_explicit(MemoryType.FACT, "Lives in Seattle")
    await store.insert_explicit(MemoryType.PREFERENCE, "Loves hiking")

    context = await build_memory_context(store, "anything")

    assert context == (
        "\n\n## What you know about the user:\n"
        "\n### Fact:\n"
        "- Lives in Seattle\n"
        "\n### Preference:\n"
        "- Loves hiking\n"
    )
    assert context.index("### Fact:") < context.index("### Preference:")


@pytest.mark.asyncio
async def test_context_is_empty_when_nothing_qualifies(store):
    await store.insert_inferred(MemoryType.FACT, "Maybe a teacher", 0.4)
    assert await build_memory_context(store, "hello") == ""


@pytest.mark.asyncio
async def test_group_order_independent_of_insertion_order(store, tmp_path, clock):
    items = [
        (MemoryType.RELATIONSHIP, "Sister named Emma"),
        (MemoryType.FACT, "Lives in Seattle"),
        (MemoryType.GOAL, "Training for a marathon"),
        (MemoryType.FACT, "Works as engineer"),
    ]
    for memory_type, content in items:
        await store.insert_explicit(memory_type, content)

    other_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'other.db'}")
    await init_models(other_engine)
    other_store = MemoryStore(make_session_factory(other_engine), clock=clock)
    for memory_type, content in reversed(items):
        await other_store.insert_explicit(memory_type, content)

    def headings(text: str) -> list[str]:
        return [line for line in text.splitlines() if line.startswith("### ")]

    first = await build_memory_context(store, "q")
    second = await build_memory_context(other_store, "q")
    await other_engine.dispose()

    assert headings(first) == headings(second) == ["### Fact:", "### Goal:", "### Relationship:"]
    # Within a group, recency decides.
    assert first.index("Works as engineer") < first.index("Lives in Seattle")
    assert second.index("Lives in Seattle") < second.index("Works as engineer")


@pytest.mark.asyncio
async def test_context_limit_defaults_to_fifteen(store):
    for i in range(20):
        await store.insert_explicit(MemoryType.FACT, f"fact {i}")

    context = await build_memory_context(store, "anything")
    assert context.count("\n- ") == 15


@pytest.mark.asyncio
async def test_context_records_access(store):
    memory = await store.insert_explicit(MemoryType.FACT, "Lives in Seattle")

    await build_memory_context(store, "anything")
    await build_memory_context(store, "anything else")

    fetched = await store.get(memory.id)
    assert fetched.access_count == 2
    assert fetched.last_accessed_at is not None


@pytest.mark.asyncio
async def test_context_preview_does_not_record_access(store):
    memory = await store.insert_explicit(MemoryType.FACT, "Lives in Seattle")

    await build_memory_context(store, "anything", track_access=False)

    fetched = await store.get(memory.id)
    assert fetched.access_count == 0
    assert fetched.last_accessed_at is None


@pytest.mark.asyncio
async def test_access_tracking_failure_keeps_context(store):
    await store.insert_explicit(MemoryType.FACT, "Lives in Seattle")

    with patch.object(store, "touch", new_callable=AsyncMock, side_effect=StorageError("disk full")):
        context = await build_memory_context(store, "anything")

    assert "- Lives in Seattle" in context


@pytest.mark.asyncio
async def test_retrieval_failure_propagates(broken_store):
    with pytest.raises(StorageError):
        await build_memory_context(broken_store, "anything")


# ── prompt assembly ──


@pytest.mark.asyncio
async def test_system_prompt_appends_memories(store):
    await store.insert_explicit(MemoryType.PREFERENCE, "Loves hiking")

    prompt = await build_system_prompt(store, "weekend plans", base_prompt="You are a journal.\n")

    assert prompt.startswith("You are a journal.\n\n## What you know about the user:")
    assert prompt.endswith("- Loves hiking\n")


@pytest.mark.asyncio
async def test_system_prompt_without_memories_is_base_prompt(store):
    prompt = await build_system_prompt(store, "hello")
    assert prompt == SYSTEM_JOURNAL


@pytest.mark.asyncio
async def test_system_prompt_survives_storage_failure(broken_store):
    prompt = await build_system_prompt(broken_store, "hello", base_prompt="Base.")
    assert prompt == "Base."


def test_load_base_prompt_reads_and_trims_file(tmp_path):
    prompt_file = tmp_path / "system_prompt.txt"
    prompt_file.write_text("\n  Custom journaling prompt.  \n", encoding="utf-8")

    assert load_base_prompt(str(prompt_file)) == "Custom journaling prompt."
    assert load_base_prompt(str(tmp_path / "missing.txt")) == SYSTEM_JOURNAL
