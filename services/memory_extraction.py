# services/memory_extraction.py
"""
Memory extraction: propose inferred memories from a finished conversation.

Extractors only propose candidates. Everything they produce is written
through ``MemoryStore.insert_inferred_batch`` so confidence handling for
non-explicit memories lives in one place. One malformed candidate
rejects the whole batch, and a batch is stored in a single transaction.
"""
from __future__ import annotations

import json
import logging
import math
import uuid
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from openai import OpenAIError

from ai.prompts.memory_extraction import MEMORY_EXTRACTION
from api.app.config import get_settings
from models.memory import Memory, MemoryType
from services.errors import ExtractionError
from services.memory_store import MemoryStore
from services.openai_llm import extract_json

logger = logging.getLogger(__name__)

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"

DEFAULT_MIN_CONFIDENCE = 0.6
RULE_CONFIDENCE = 0.8


@dataclass
class ConversationTurn:
    role: str
    text: str
    message_id: uuid.UUID | None = None

    @property
    def is_user(self) -> bool:
        return self.role == USER_ROLE


@dataclass
class MemoryCandidate:
    type: MemoryType
    content: str
    confidence: float
    category: str | None = None
    source_message_id: uuid.UUID | None = None


def format_transcript(turns: Sequence[ConversationTurn]) -> str:
    return "\n".join(
        f"{'User' if turn.is_user else 'AI'}: {turn.text.strip()}"
        for turn in turns
        if turn.text.strip()
    )


# ── extractors ──


class MemoryExtractor(ABC):
    """Proposes memories from conversation turns."""

    @abstractmethod
    async def extract(self, turns: Sequence[ConversationTurn]) -> list[MemoryCandidate]:
        """Return candidate memories; raise ExtractionError on unusable output."""


class NullMemoryExtractor(MemoryExtractor):
    """Default extractor: proposes nothing."""

    async def extract(self, turns: Sequence[ConversationTurn]) -> list[MemoryCandidate]:
        return []


def rule_based_memory_candidates(text: str) -> list[tuple[MemoryType, str]]:
    stripped = text.strip()
    t = stripped.lower()
    memories: list[tuple[MemoryType, str]] = []

    if t.startswith("i like "):
        memories.append((MemoryType.PREFERENCE, f"Likes {stripped[7:].strip()}"))
    elif t.startswith("i love "):
        memories.append((MemoryType.PREFERENCE, f"Loves {stripped[7:].strip()}"))
    elif t.startswith("my favorite"):
        memories.append((MemoryType.PREFERENCE, stripped))
    elif t.startswith("i don't like") or t.startswith("i dont like"):
        memories.append((MemoryType.PREFERENCE, stripped))
    elif t.startswith("my goal is") or t.startswith("i'm training for"):
        memories.append((MemoryType.GOAL, stripped))
    elif "my sister" in t or "my brother" in t or "my best friend" in t:
        memories.append((MemoryType.RELATIONSHIP, stripped))
    elif t.startswith("i am scared of") or "i'm scared of" in t:
        memories.append((MemoryType.MOOD, stripped))

    return memories


class RuleBasedMemoryExtractor(MemoryExtractor):
    """Offline extractor matching a few first-person statement patterns in user turns."""

    def __init__(self, confidence: float = RULE_CONFIDENCE):
        self.confidence = confidence

    async def extract(self, turns: Sequence[ConversationTurn]) -> list[MemoryCandidate]:
        candidates = []
        for turn in turns:
            if not turn.is_user:
                continue
            for memory_type, content in rule_based_memory_candidates(turn.text):
                candidates.append(
                    MemoryCandidate(
                        type=memory_type,
                        content=content,
                        confidence=self.confidence,
                        source_message_id=turn.message_id,
                    )
                )
        return candidates


class LLMMemoryExtractor(MemoryExtractor):
    """Asks a JSON-mode chat model for memories."""

    def __init__(
        self,
        complete_json: Callable[[str, str], Awaitable[str]] | None = None,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    ):
        self._complete_json = complete_json
        self.min_confidence = min_confidence

    async def extract(self, turns: Sequence[ConversationTurn]) -> list[MemoryCandidate]:
        complete = self._complete_json or extract_json
        system_prompt = MEMORY_EXTRACTION.format(min_confidence=self.min_confidence)
        try:
            raw = await complete(system_prompt, format_transcript(turns))
        except OpenAIError as exc:
            raise ExtractionError(f"Extraction request failed: {exc}") from exc

        candidates = parse_candidates(raw)
        logger.info("Extracted %d memory candidates", len(candidates))
        return candidates


# ── parsing ──


def _parse_candidate(index: int, item: object) -> MemoryCandidate:
    if not isinstance(item, dict):
        raise ExtractionError(f"Memory #{index} is not an object")

    try:
        memory_type = MemoryType(str(item["type"]).strip().lower())
    except (KeyError, ValueError) as exc:
        raise ExtractionError(f"Memory #{index} has an invalid type") from exc

    content = item.get("content")
    if not isinstance(content, str) or not content.strip():
        raise ExtractionError(f"Memory #{index} has no content")

    confidence = item.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) or math.isnan(confidence):
        raise ExtractionError(f"Memory #{index} has an invalid confidence")

    category = item.get("category")
    if category is not None and not isinstance(category, str):
        raise ExtractionError(f"Memory #{index} has an invalid category")

    return MemoryCandidate(
        type=memory_type,
        content=content.strip(),
        confidence=float(confidence),
        category=category,
    )


def parse_candidates(raw: str) -> list[MemoryCandidate]:
    """
    Parse model output: a JSON list of memories, or an object holding one
    under ``memories``. Any bad element rejects the entire batch.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ExtractionError("Extraction output is not valid JSON") from exc

    if isinstance(data, dict):
        data = data.get("memories")
    if not isinstance(data, list):
        raise ExtractionError("Extraction output has no list of memories")

    return [_parse_candidate(index, item) for index, item in enumerate(data)]


def validate_candidates(candidates: Sequence[MemoryCandidate]) -> None:
    """Reject the whole batch if any candidate could not be stored as given."""
    for index, candidate in enumerate(candidates):
        try:
            MemoryType(candidate.type)
        except ValueError as exc:
            raise ExtractionError(f"Memory #{index} has an invalid type") from exc
        if not isinstance(candidate.content, str) or not candidate.content.strip():
            raise ExtractionError(f"Memory #{index} has no content")
        confidence = candidate.confidence
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) or math.isnan(confidence):
            raise ExtractionError(f"Memory #{index} has an invalid confidence")


def apply_extraction_guidance(
    candidates: Sequence[MemoryCandidate],
    turns: Sequence[ConversationTurn],
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> list[MemoryCandidate]:
    """Drop low-confidence candidates, and traits inferred from a single user message."""
    user_turns = sum(1 for turn in turns if turn.is_user)
    kept = []
    for candidate in candidates:
        if candidate.confidence < min_confidence:
            continue
        if candidate.type is MemoryType.TRAIT and user_turns < 2:
            continue
        kept.append(candidate)

    if len(kept) != len(candidates):
        logger.info("Dropped %d of %d memory candidates", len(candidates) - len(kept), len(candidates))
    return kept


async def extract_and_store(
    store: MemoryStore,
    extractor: MemoryExtractor,
    turns: Sequence[ConversationTurn],
    source_session_id: uuid.UUID | None = None,
    min_confidence: float | None = None,
) -> list[Memory]:
    """
    Run an extractor over a finished conversation and store what survives.

    The kept candidates are written in one transaction, so a StorageError
    propagates with none of the batch stored.
    """
    if min_confidence is None:
        min_confidence = get_settings().extraction_min_confidence

    turns = [turn for turn in turns if turn.text.strip()]
    if not turns:
        return []

    try:
        candidates = await extractor.extract(turns)
        validate_candidates(candidates)
    except ExtractionError as exc:
        logger.error("Memory extraction failed, batch rejected: %s", exc)
        return []

    kept = apply_extraction_guidance(candidates, turns, min_confidence)
    return await store.insert_inferred_batch(
        [
            {
                "type": candidate.type,
                "content": candidate.content,
                "confidence": candidate.confidence,
                "category": candidate.category,
                "source_session_id": source_session_id,
                "source_message_id": candidate.source_message_id,
            }
            for candidate in kept
        ]
    )
