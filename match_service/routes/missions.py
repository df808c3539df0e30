"""
Mission Routes

Endpoints:
    POST /api/missions/parse - Extract structured attributes from a mission
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from src.common.types import MissionAttributes
from src.services.mission_parser_service import MissionParserService

from ..auth import get_user_id, verify_token
from ..dependencies import get_mission_parser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/missions", tags=["missions"])

MISSION_MIN_LENGTH = 10
MISSION_MAX_LENGTH = 2000


def validate_mission_text(v: str) -> str:
    """Trim and bound the mission length (shared with the search route)."""
    v = (v or "").strip()
    if len(v) < MISSION_MIN_LENGTH:
        raise ValueError(f"Mission must be at least {MISSION_MIN_LENGTH} characters")
    if len(v) > MISSION_MAX_LENGTH:
        raise ValueError(f"Mission must be at most {MISSION_MAX_LENGTH} characters")
    return v


class ParseMissionRequest(BaseModel):
    """Request model for mission parsing."""
    mission: str = Field(..., description="Free-text networking mission")

    @field_validator("mission")
    @classmethod
    def validate_mission(cls, v: str) -> str:
        return validate_mission_text(v)


class ParseMissionResponse(BaseModel):
    """Response model for mission parsing."""
    success: bool = True
    attributes: MissionAttributes
    original_mission: str


@router.post("/parse", response_model=ParseMissionResponse, dependencies=[Depends(verify_token)])
async def parse_mission(
    request: ParseMissionRequest,
    user_id: str = Depends(get_user_id),
    parser: MissionParserService = Depends(get_mission_parser),
):
    """
    Extract industry, location, role and description from the mission.

    Missing attributes come back as "Not specified".
    """
    logger.info(f"Parsing mission for user {user_id}")
    attributes = await parser.parse(request.mission)
    return ParseMissionResponse(attributes=attributes, original_mission=request.mission)
