# api/app/routes/memories.py
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from api.app.dependencies import get_memory_store
from api.app.schemas.memory import (
    MemoryContextResponse,
    MemoryCorrection,
    MemoryCreate,
    MemoryResponse,
    MemoryTypeCount,
    MemoryUpdate,
)
from models.memory import Memory, MemoryType
from services.errors import MemoryNotFoundError
from services.memory_retrieval import get_all_memories
from services.memory_service import build_memory_context
from services.memory_store import MemoryStore

router = APIRouter(tags=["memories"])


async def _get_or_404(store: MemoryStore, memory_id: uuid.UUID) -> Memory:
    memory = await store.get(memory_id)
    if memory is None:
        raise MemoryNotFoundError(memory_id)
    return memory


@router.get("/memories", response_model=list[MemoryResponse])
async def list_memories(
    type: list[MemoryType] | None = Query(default=None),
    include_inactive: bool = False,
    q: str | None = None,
    store: MemoryStore = Depends(get_memory_store),
):
    if q and q.strip():
        memories = await store.search(q, types=type, include_inactive=include_inactive)
    else:
        memories = await get_all_memories(store, types=type, include_inactive=include_inactive)
    return [MemoryResponse.model_validate(m) for m in memories]


@router.get("/memories/counts", response_model=list[MemoryTypeCount])
async def memory_counts(store: MemoryStore = Depends(get_memory_store)):
    counts = await store.count_by_type()
    return [
        MemoryTypeCount(
            type=memory_type,
            label=memory_type.label,
            description=memory_type.description,
            count=count,
        )
        for memory_type, count in counts.items()
    ]


@router.get("/memories/context", response_model=MemoryContextResponse)
async def preview_memory_context(
    query: str = "",
    store: MemoryStore = Depends(get_memory_store),
):
    """Preview the block the next turn would receive. Previews are not counted as access."""
    context = await build_memory_context(store, query, track_access=False)
    return MemoryContextResponse(context=context)


@router.get("/memories/{memory_id}", response_model=MemoryResponse)
async def get_memory(memory_id: uuid.UUID, store: MemoryStore = Depends(get_memory_store)):
    memory = await _get_or_404(store, memory_id)
    return MemoryResponse.model_validate(memory)


@router.post("/memories", response_model=MemoryResponse, status_code=status.HTTP_201_CREATED)
async def create_memory(body: MemoryCreate, store: MemoryStore = Depends(get_memory_store)):
    try:
        memory = await store.insert_explicit(body.type, body.content, category=body.category)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return MemoryResponse.model_validate(memory)


@router.patch("/memories/{memory_id}", response_model=MemoryResponse)
async def update_memory(
    memory_id: uuid.UUID,
    body: MemoryUpdate,
    store: MemoryStore = Depends(get_memory_store),
):
    memory = await _get_or_404(store, memory_id)
    try:
        memory = await store.update(memory, content=body.content, is_active=body.is_active)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return MemoryResponse.model_validate(memory)


@router.post(
    "/memories/{memory_id}/correction",
    response_model=MemoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def correct_memory(
    memory_id: uuid.UUID,
    body: MemoryCorrection,
    store: MemoryStore = Depends(get_memory_store),
):
    memory = await _get_or_404(store, memory_id)
    try:
        correction = await store.insert_correction(memory, body.content)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return MemoryResponse.model_validate(correction)


@router.delete("/memories/{memory_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_memory(memory_id: uuid.UUID, store: MemoryStore = Depends(get_memory_store)):
    memory = await _get_or_404(store, memory_id)
    await store.delete(memory)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
