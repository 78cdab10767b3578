# ai/memory_context.py
"""
Renders selected memories into the block appended to the system prompt.

Output is a pure function of the input list: groups are ordered by an
explicit sort on the type label and each group keeps arrival order.
"""
from __future__ import annotations

from collections.abc import Sequence

from models.memory import Memory

CONTEXT_HEADER = "\n\n## What you know about the user:\n"


def build_context(memories: Sequence[Memory]) -> str:
    """Empty input renders as "" (nothing to inject)."""
    if not memories:
        return ""

    sections: dict[str, list[str]] = {}
    for memory in memories:
        sections.setdefault(memory.type.label, []).append(memory.content)

    parts = [CONTEXT_HEADER]
    for label in sorted(sections):
        parts.append(f"\n### {label}:\n")
        parts.extend(f"- {content}\n" for content in sections[label])
    return "".join(parts)


def append_context(base_prompt: str, context: str) -> str:
    return base_prompt.strip() + context
