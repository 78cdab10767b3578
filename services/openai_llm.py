# services/openai_llm.py
from __future__ import annotations

import logging

from openai import AsyncOpenAI

from api.app.config import get_settings

logger = logging.getLogger(__name__)


async def extract_json(system_prompt: str, user_message: str) -> str:
    """Run a completion expecting JSON output (memory extraction)."""
    settings = get_settings()
    client = AsyncOpenAI(api_key=settings.openai_api_key)

    logger.info("LLM: requesting JSON from %s", settings.openai_model)
    response = await client.chat.completions.create(
        model=settings.openai_model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ],
        temperature=0.2,
        max_tokens=1024,
        response_format={"type": "json_object"},
    )
    return response.choices[0].message.content or "{}"
