"""
Search Routes

Endpoints:
    POST /api/search - Rank a session's candidates against a mission
"""

import asyncio
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from src.common.error_handling import MissionParseError, SearchTimeoutError
from src.common.repositories import SearchHistoryRepositoryInterface
from src.common.types import MissionAttributes, SearchResponse
from src.matching import MatchEngine
from src.services.mission_parser_service import MissionParserService

from ..auth import get_user_id, verify_session_ownership, verify_token
from ..dependencies import get_history_store, get_match_engine, get_mission_parser
from .missions import validate_mission_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["search"])


class SearchRequest(BaseModel):
    """Request model for a mission search."""
    mission: str = Field(..., description="Free-text networking mission (10-2000 chars)")
    session_id: str = Field(..., min_length=5, max_length=200, description="Upload session id")
    attributes: Optional[MissionAttributes] = Field(
        default=None,
        description="Pre-parsed mission attributes; parsed from the mission when omitted",
    )
    save_history: bool = Field(default=True, description="Archive the result under the user")

    @field_validator("mission")
    @classmethod
    def validate_mission(cls, v: str) -> str:
        return validate_mission_text(v)

    @field_validator("session_id")
    @classmethod
    def strip_session_id(cls, v: str) -> str:
        return v.strip()


async def _resolve_attributes(
    request: SearchRequest,
    parser: MissionParserService,
) -> MissionAttributes:
    if request.attributes is not None:
        return request.attributes
    try:
        return await parser.parse(request.mission)
    except MissionParseError as e:
        logger.warning(f"Mission parsing failed, searching without attributes: {e}")
        return MissionAttributes(description=request.mission)


async def _archive(
    history: SearchHistoryRepositoryInterface,
    user_id: str,
    request: SearchRequest,
    response: SearchResponse,
) -> None:
    record = {
        "mission": request.mission,
        "matches": [m.model_dump() for m in response.matches],
        "recommendation": response.recommendation,
    }
    try:
        await asyncio.to_thread(history.append, user_id, record)
    except Exception as e:
        # The search result is still returned
        logger.error(f"Failed to archive search for user {user_id}: {e}")


@router.post("/search", response_model=SearchResponse, dependencies=[Depends(verify_token)])
async def search(
    request: SearchRequest,
    user_id: str = Depends(get_user_id),
    engine: MatchEngine = Depends(get_match_engine),
    parser: MissionParserService = Depends(get_mission_parser),
    history: SearchHistoryRepositoryInterface = Depends(get_history_store),
):
    """
    Run the match engine for one of the caller's sessions.

    Errors are raised as MatchEngineError subclasses and rendered by the
    app-level handler (400, 404, 408, 500, 502).
    """
    verify_session_ownership(request.session_id, user_id)

    # Parsing counts against the same end-to-end deadline as the search
    budget = engine.settings.search_timeout_seconds
    started = time.monotonic()
    try:
        attributes = await asyncio.wait_for(_resolve_attributes(request, parser), timeout=budget)
    except asyncio.TimeoutError:
        attributes = None
    remaining = budget - (time.monotonic() - started)
    if attributes is None or remaining <= 0:
        raise SearchTimeoutError(
            f"Search timed out after {budget:g} seconds",
            details="Mission parsing did not finish",
        )

    response = await engine.search(
        request.mission, request.session_id, user_id, attributes, timeout=remaining
    )

    if request.save_history and response.matches:
        await _archive(history, user_id, request, response)
    return response
