# models/event.py
from __future__ import annotations

import uuid

from sqlalchemy import JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDPrimaryKey


class MemoryEvent(Base, UUIDPrimaryKey, TimestampMixin):
    __tablename__ = "memory_events"

    event_type: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    level: Mapped[str] = mapped_column(String(16), nullable=False, default="info")  # debug | info | warning | error
    # No foreign key: events outlive hard-deleted memories.
    memory_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True, index=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)
