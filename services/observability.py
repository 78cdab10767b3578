# services/observability.py
"""
Structured memory audit events, persisted next to the change they describe.
"""
from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from models.event import MemoryEvent

logger = logging.getLogger(__name__)


def log_event(
    db: AsyncSession,
    event_type: str,
    level: str = "info",
    memory_id: uuid.UUID | None = None,
    message: str | None = None,
    metadata: dict | None = None,
) -> MemoryEvent:
    """Stage an audit event in the caller's transaction and mirror it to the log."""
    event = MemoryEvent(
        event_type=event_type,
        level=level,
        memory_id=memory_id,
        message=message,
        metadata_=metadata,
    )
    db.add(event)
    logger.log(
        getattr(logging, level.upper(), logging.INFO),
        "[%s] %s — %s",
        event_type,
        message or "",
        metadata or {},
    )
    return event
