# ai/prompts/__init__.py
from ai.prompts.memory_extraction import MEMORY_EXTRACTION
from ai.prompts.system_journal import SYSTEM_JOURNAL

__all__ = ["MEMORY_EXTRACTION", "SYSTEM_JOURNAL"]
