# scripts/init_db.py
"""
Create the schema, the personality profile, and (optionally) a few sample memories.
Run: python scripts/init_db.py [--with-samples]
"""
from __future__ import annotations

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from db.engine import get_engine, init_models
from db.session import get_db, get_session_factory
from models.memory import MemoryType
from services.memory_store import MemoryStore
from services.profile_service import get_or_create_profile

SAMPLE_MEMORIES = [
    (MemoryType.FACT, "Lives in Seattle", None),
    (MemoryType.PREFERENCE, "Loves hiking", "outdoors"),
    (MemoryType.GOAL, "Training for a marathon", "fitness"),
    (MemoryType.RELATIONSHIP, "Sister named Emma", "family"),
]


async def init(with_samples: bool) -> None:
    engine = get_engine()
    await init_models(engine)
    print(f"Schema ready: {engine.url.render_as_string(hide_password=True)}")

    async for db in get_db():
        profile = await get_or_create_profile(db)
        print(f"Personality profile: {profile.id}")

    if with_samples:
        store = MemoryStore(get_session_factory())
        existing = await store.query(active_only=False, limit=1)
        if existing:
            print("Memories already present, skipping samples.")
        else:
            for memory_type, content, category in SAMPLE_MEMORIES:
                memory = await store.insert_explicit(memory_type, content, category=category)
                print(f"Created {memory.type.value} memory: {memory.content}")

    await engine.dispose()
    print("✅ Init complete.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--with-samples", action="store_true", help="seed sample memories into an empty store")
    args = parser.parse_args()
    asyncio.run(init(args.with_samples))
