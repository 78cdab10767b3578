# api/app/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from api.app.config import get_settings
from api.app.middleware.request_logging import RequestLoggingMiddleware
from api.app.routes import health, memories, personality_profile
from db.engine import get_engine, init_models
from db.session import get_session_factory
from services.errors import MemoryNotFoundError, StorageError
from services.memory_store import MemoryStore

logging.basicConfig(
    level=getattr(logging, get_settings().log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    engine = get_engine()
    if settings.database_url.startswith("sqlite"):
        await init_models(engine)
    app.state.memory_store = MemoryStore(get_session_factory())
    logger.info("Memory store ready (%s)", engine.url.render_as_string(hide_password=True))
    yield
    await engine.dispose()


app = FastAPI(
    title="Companion Memory API",
    description="Long-term memory for the journaling companion",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(MemoryNotFoundError)
async def memory_not_found_handler(request: Request, exc: MemoryNotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Memory storage unavailable"},
    )


app.include_router(health.router)
app.include_router(memories.router, prefix="/v1")
app.include_router(personality_profile.router, prefix="/v1")
