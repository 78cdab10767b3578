# api/app/schemas/memory.py
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from models.memory import MemorySource, MemoryType


class MemoryResponse(BaseModel):
    id: uuid.UUID
    type: MemoryType
    content: str
    source: MemorySource
    confidence: float
    category: str | None = None
    created_at: datetime
    updated_at: datetime
    last_accessed_at: datetime | None = None
    access_count: int
    is_active: bool
    source_session_id: uuid.UUID | None = None
    source_message_id: uuid.UUID | None = None
    related_memory_ids: list[str] | None = None

    class Config:
        from_attributes = True


class MemoryCreate(BaseModel):
    type: MemoryType
    content: str = Field(min_length=1)
    category: str | None = None


class MemoryUpdate(BaseModel):
    content: str | None = Field(default=None, min_length=1)
    is_active: bool | None = None


class MemoryCorrection(BaseModel):
    content: str = Field(min_length=1)


class MemoryTypeCount(BaseModel):
    type: MemoryType
    label: str
    description: str
    count: int


class MemoryContextResponse(BaseModel):
    context: str
