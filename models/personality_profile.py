# models/personality_profile.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, CheckConstraint, Float, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UTCDateTime, UUIDPrimaryKey

BIG_FIVE_TRAITS = (
    "openness",
    "conscientiousness",
    "extraversion",
    "agreeableness",
    "neuroticism",
)


class PersonalityProfile(Base, UUIDPrimaryKey, TimestampMixin):
    """One row per user. Nothing derives these scores yet; it is a passive store."""

    __tablename__ = "personality_profiles"
    __table_args__ = tuple(
        CheckConstraint(
            f"{trait} IS NULL OR ({trait} >= 0.0 AND {trait} <= 1.0)",
            name=f"ck_personality_profiles_{trait}_range",
        )
        for trait in BIG_FIVE_TRAITS
    )

    openness: Mapped[float | None] = mapped_column(Float, nullable=True)
    conscientiousness: Mapped[float | None] = mapped_column(Float, nullable=True)
    extraversion: Mapped[float | None] = mapped_column(Float, nullable=True)
    agreeableness: Mapped[float | None] = mapped_column(Float, nullable=True)
    neuroticism: Mapped[float | None] = mapped_column(Float, nullable=True)

    custom_traits: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary_generated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
