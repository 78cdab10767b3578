# models/__init__.py
from models.base import Base
from models.event import MemoryEvent
from models.memory import Memory, MemorySource, MemoryType
from models.personality_profile import PersonalityProfile

__all__ = [
    "Base",
    "Memory",
    "MemoryEvent",
    "MemorySource",
    "MemoryType",
    "PersonalityProfile",
]
