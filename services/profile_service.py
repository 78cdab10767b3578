# services/profile_service.py
"""
Personality profile: a passive per-user store of trait scores and a summary.
"""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import utcnow
from models.personality_profile import BIG_FIVE_TRAITS, PersonalityProfile

logger = logging.getLogger(__name__)


def _clamp_score(value: float | None) -> float | None:
    if value is None:
        return None
    return max(0.0, min(1.0, float(value)))


async def get_or_create_profile(db: AsyncSession) -> PersonalityProfile:
    stmt = select(PersonalityProfile).order_by(PersonalityProfile.created_at).limit(1)
    result = await db.execute(stmt)
    profile = result.scalar_one_or_none()
    if profile is None:
        now = utcnow()
        profile = PersonalityProfile(custom_traits={}, created_at=now, updated_at=now)
        db.add(profile)
        await db.flush()
        logger.info("Created personality profile %s", profile.id)
    return profile


async def update_profile(db: AsyncSession, **fields) -> PersonalityProfile:
    """
    Apply a partial update.

    Trait scores are clamped into [0, 1]; custom traits replace the stored
    mapping; a changed summary restamps ``summary_generated_at``.
    """
    unknown = set(fields) - set(BIG_FIVE_TRAITS) - {"custom_traits", "summary"}
    if unknown:
        raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

    profile = await get_or_create_profile(db)
    now = utcnow()

    for trait in BIG_FIVE_TRAITS:
        if trait in fields:
            setattr(profile, trait, _clamp_score(fields.pop(trait)))

    if "custom_traits" in fields:
        custom = fields.pop("custom_traits") or {}
        profile.custom_traits = {name: _clamp_score(score) for name, score in custom.items()}

    if "summary" in fields:
        summary = fields.pop("summary")
        if summary != profile.summary:
            profile.summary = summary
            profile.summary_generated_at = now if summary else None

    profile.updated_at = now
    await db.flush()
    return profile
