# ai/prompts/memory_extraction.py
"""Prompt for proposing new memories from a finished conversation."""

MEMORY_EXTRACTION = """Analyze the conversation in the user message and extract any new information about the user.

Respond with JSON:
{{
  "memories": [
    {{
      "type": "fact|preference|event|mood|goal|trait|relationship",
      "content": "...",
      "confidence": 0.0-1.0
    }}
  ]
}}

Only extract information the user directly stated or strongly implied.
Be conservative with confidence scores and skip anything below {min_confidence}.
Never infer a personality trait from a single message.
If there is nothing worth remembering, return {{"memories": []}}.
"""
