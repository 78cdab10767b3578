# api/app/schemas/personality_profile.py
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class PersonalityProfileResponse(BaseModel):
    id: uuid.UUID
    openness: float | None = None
    conscientiousness: float | None = None
    extraversion: float | None = None
    agreeableness: float | None = None
    neuroticism: float | None = None
    custom_traits: dict[str, float | None]
    summary: str | None = None
    summary_generated_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PersonalityProfileUpdate(BaseModel):
    openness: float | None = Field(default=None, ge=0.0, le=1.0)
    conscientiousness: float | None = Field(default=None, ge=0.0, le=1.0)
    extraversion: float | None = Field(default=None, ge=0.0, le=1.0)
    agreeableness: float | None = Field(default=None, ge=0.0, le=1.0)
    neuroticism: float | None = Field(default=None, ge=0.0, le=1.0)
    custom_traits: dict[str, float] | None = None
    summary: str | None = None
