# services/errors.py
"""
Errors raised by the memory layer.
"""
from __future__ import annotations

import uuid


class MemoryLayerError(Exception):
    """Base class for memory layer failures."""


class StorageError(MemoryLayerError):
    """The underlying database failed to read or write."""


class MemoryNotFoundError(MemoryLayerError):
    def __init__(self, memory_id: uuid.UUID):
        super().__init__(f"Memory {memory_id} not found")
        self.memory_id = memory_id


class ExtractionError(MemoryLayerError):
    """Model-proposed memories could not be parsed; the whole batch is rejected."""
