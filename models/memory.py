# models/memory.py
from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, CheckConstraint, Float, Integer, String, Text, Uuid
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UTCDateTime, UUIDPrimaryKey, utcnow


class MemoryType(str, enum.Enum):
    FACT = "fact"
    PREFERENCE = "preference"
    EVENT = "event"
    MOOD = "mood"
    GOAL = "goal"
    TRAIT = "trait"
    RELATIONSHIP = "relationship"

    @property
    def label(self) -> str:
        """Display label, e.g. ``Fact``."""
        return self.value.capitalize()

    @property
    def description(self) -> str:
        return MEMORY_TYPE_DESCRIPTIONS[self]


MEMORY_TYPE_DESCRIPTIONS: dict[MemoryType, str] = {
    MemoryType.FACT: "Basic facts about you (e.g., 'Lives in Seattle', 'Works as engineer')",
    MemoryType.PREFERENCE: "Things you like or dislike (e.g., 'Loves hiking', 'Dislikes crowds')",
    MemoryType.EVENT: "Important events (e.g., 'Started new job in January')",
    MemoryType.MOOD: "Emotional patterns (e.g., 'Feels anxious on Mondays')",
    MemoryType.GOAL: "Things you're working towards (e.g., 'Training for a marathon')",
    MemoryType.TRAIT: "Personality characteristics (e.g., 'Tends to overthink', 'Values honesty')",
    MemoryType.RELATIONSHIP: "People in your life (e.g., 'Sister named Emma', 'Best friend is Jake')",
}


class MemorySource(str, enum.Enum):
    EXPLICIT = "explicit"  # user stated it directly
    INFERRED = "inferred"  # extracted from a conversation
    CORRECTED = "corrected"  # user overrode an inferred value


FULL_CONFIDENCE_SOURCES = frozenset({MemorySource.EXPLICIT, MemorySource.CORRECTED})


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Memory(Base, UUIDPrimaryKey, TimestampMixin):
    __tablename__ = "memories"
    __table_args__ = (
        CheckConstraint("confidence >= 0.0 AND confidence <= 1.0", name="ck_memories_confidence_range"),
        CheckConstraint("access_count >= 0", name="ck_memories_access_count"),
    )

    type: Mapped[MemoryType] = mapped_column(
        SAEnum(MemoryType, native_enum=False, length=32, values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[MemorySource] = mapped_column(
        SAEnum(MemorySource, native_enum=False, length=32, values_callable=_enum_values),
        nullable=False,
    )
    confidence: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    category: Mapped[str | None] = mapped_column(String(128), nullable=True)

    last_accessed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    access_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    # Back-references to the conversation that produced an inferred memory.
    source_session_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    source_message_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    related_memory_ids: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    @classmethod
    def create(
        cls,
        type: MemoryType,
        content: str,
        source: MemorySource = MemorySource.EXPLICIT,
        confidence: float = 1.0,
        category: str | None = None,
        now: datetime | None = None,
        **extra,
    ) -> Memory:
        """Build a fresh, unsaved memory with every invariant already satisfied."""
        now = now or utcnow()
        if source in FULL_CONFIDENCE_SOURCES:
            confidence = 1.0
        return cls(
            id=uuid.uuid4(),
            type=MemoryType(type),
            content=content,
            source=MemorySource(source),
            confidence=confidence,
            category=category,
            created_at=now,
            updated_at=now,
            last_accessed_at=None,
            access_count=0,
            is_active=True,
            **extra,
        )

    def __repr__(self) -> str:
        return f"<Memory {self.id} {self.type.value}: {self.content[:40]!r}>"
