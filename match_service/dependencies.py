"""
Shared FastAPI dependencies.

Route handlers receive the store, engine and parser through Depends() so
tests can swap them via app.dependency_overrides.
"""

import logging
from typing import Optional

from fastapi import HTTPException

from src.common.repositories import (
    CandidateRepositoryInterface,
    SearchHistoryRepositoryInterface,
    get_candidate_repository,
    get_search_history_repository,
)
from src.matching import MatchEngine
from src.services.mission_parser_service import MissionParserService

logger = logging.getLogger(__name__)

_engine: Optional[MatchEngine] = None


def get_candidate_store() -> CandidateRepositoryInterface:
    try:
        return get_candidate_repository()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))


def get_history_store() -> SearchHistoryRepositoryInterface:
    try:
        return get_search_history_repository()
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))


def get_match_engine() -> MatchEngine:
    """
    Shared MatchEngine (model clients are created once).

    Raises ConfigurationError when no LLM provider is configured; the app's
    exception handler turns that into a 500 CONFIGURATION_ERROR response.
    """
    global _engine
    if _engine is None:
        _engine = MatchEngine(store=get_candidate_store())
        logger.info("Match engine initialized")
    return _engine


def reset_match_engine() -> None:
    global _engine
    _engine = None


def get_mission_parser() -> MissionParserService:
    return MissionParserService()
