"""
FastAPI match service.

Exposes the mission match engine over HTTP: candidate upload per session,
mission parsing, search, and search history.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pymongo.errors import PyMongoError

from src.common.config import Config
from src.common.error_handling import MatchEngineError
from src.common.logger import setup_logging
from src.common.repositories import (
    get_candidate_repository,
    get_search_history_repository,
)

from . import __version__
from .config import get_settings, validate_config_on_startup
from .routes import history_router, missions_router, search_router, sessions_router

settings = get_settings()
setup_logging(level=settings.log_level, format=settings.log_format)
logger = logging.getLogger(__name__)

# Validate configuration at startup
validate_config_on_startup()

app = FastAPI(title="Mission Match", version=__version__)

if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(missions_router)
app.include_router(search_router)
app.include_router(sessions_router)
app.include_router(history_router)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str
    llm_provider: Optional[str] = None
    database: str
    database_error: Optional[str] = None
    timestamp: datetime


@app.exception_handler(MatchEngineError)
async def match_engine_error_handler(request: Request, exc: MatchEngineError) -> JSONResponse:
    """Render engine errors as {"error", "code", "details"} with their status."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "code": "VALIDATION_ERROR", "details": "; ".join(messages)},
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint for container orchestration.

    Reports configuration and database reachability.
    """
    database = "connected"
    database_error = None
    try:
        store = get_candidate_repository()
        await asyncio.to_thread(store.ping)
    except Exception as e:
        database = "unavailable"
        database_error = str(e)
        logger.warning(f"Health check: database unavailable: {e}")

    provider = Config.get_llm_provider()
    return HealthResponse(
        status="healthy" if database == "connected" and provider else "degraded",
        version=__version__,
        environment=settings.environment,
        llm_provider=provider,
        database=database,
        database_error=database_error,
        timestamp=datetime.utcnow(),
    )


@app.on_event("startup")
async def ensure_indexes() -> None:
    """Create collection indexes (best effort)."""
    try:
        await asyncio.to_thread(get_candidate_repository().ensure_indexes)
        await asyncio.to_thread(get_search_history_repository().ensure_indexes)
    except (ValueError, PyMongoError) as e:
        logger.warning(f"Skipping index creation: {e}")
