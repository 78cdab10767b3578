# ai/prompt_builder.py
"""
Assembles the system prompt for a journaling turn: the base instruction
followed by whatever the memory layer knows about the user.
"""
from __future__ import annotations

import logging
from pathlib import Path

from ai.memory_context import append_context
from ai.prompts.system_journal import SYSTEM_JOURNAL
from api.app.config import get_settings
from services.errors import StorageError
from services.memory_service import build_memory_context
from services.memory_store import MemoryStore

logger = logging.getLogger(__name__)


def load_base_prompt(path: str | None = None) -> str:
    """The prompt file's text when it exists, otherwise the built-in journaling prompt."""
    if path is None:
        path = get_settings().system_prompt_path
    if path:
        prompt_file = Path(path)
        if prompt_file.is_file():
            return prompt_file.read_text(encoding="utf-8").strip()
        logger.warning("System prompt file %s not found, using default", path)
    return SYSTEM_JOURNAL


async def build_system_prompt(
    store: MemoryStore,
    query_text: str,
    base_prompt: str | None = None,
) -> str:
    """Build the full system prompt; a storage failure yields the base prompt alone."""
    if base_prompt is None:
        base_prompt = load_base_prompt()

    try:
        memory_context = await build_memory_context(store, query_text)
    except StorageError as exc:
        # The turn goes out without personalization.
        logger.warning("Continuing without memory context: %s", exc)
        memory_context = ""

    return append_context(base_prompt, memory_context)
