"""
Session Routes

Endpoints:
    POST   /api/sessions/{session_id}/candidates - Store structured candidates
    DELETE /api/sessions/{session_id}            - Remove a session's candidates
"""

import asyncio
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field, field_validator

from src.common.repositories import CandidateRepositoryInterface
from src.common.types import Candidate

from ..auth import get_user_id, verify_session_ownership, verify_token
from ..dependencies import get_candidate_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])

MAX_CANDIDATES_PER_REQUEST = 5000


class CandidateIn(BaseModel):
    """One structured contact record; ``id`` is generated when omitted."""
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    industry: Optional[str] = None
    summary: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    linkedin_url: Optional[str] = None
    email: Optional[str] = None
    skills: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Candidate name must not be empty")
        return v

    def to_candidate(self, user_id: str, session_id: str) -> Candidate:
        data = self.model_dump()
        data["id"] = self.id or f"profile_{uuid.uuid4().hex[:12]}"
        return Candidate(**data, user_id=user_id, session_id=session_id)


class UpsertCandidatesRequest(BaseModel):
    """Request model for candidate upload."""
    candidates: List[CandidateIn] = Field(..., min_length=1, max_length=MAX_CANDIDATES_PER_REQUEST)
    reset_embeddings: bool = Field(
        default=False,
        description="Drop stored vectors so they are recomputed on the next search",
    )


class UpsertCandidatesResponse(BaseModel):
    success: bool = True
    session_id: str
    received: int
    inserted: int
    updated: int


class ClearSessionResponse(BaseModel):
    success: bool = True
    session_id: str
    deleted: int


@router.post(
    "/{session_id}/candidates",
    response_model=UpsertCandidatesResponse,
    dependencies=[Depends(verify_token)],
)
async def upsert_candidates(
    request: UpsertCandidatesRequest,
    session_id: str = Path(..., min_length=5, max_length=200),
    user_id: str = Depends(get_user_id),
    store: CandidateRepositoryInterface = Depends(get_candidate_store),
):
    """
    Insert or update candidates in one of the caller's sessions.

    A (name, company) pair already present in the session is updated in
    place; its stored embedding is kept unless reset_embeddings is set.
    """
    verify_session_ownership(session_id, user_id)

    candidates = [c.to_candidate(user_id, session_id) for c in request.candidates]
    result = await asyncio.to_thread(
        store.upsert_candidates,
        user_id,
        session_id,
        candidates,
        request.reset_embeddings,
    )
    return UpsertCandidatesResponse(
        session_id=session_id,
        received=len(candidates),
        inserted=result.upserted_count,
        updated=result.modified_count,
    )


@router.delete(
    "/{session_id}",
    response_model=ClearSessionResponse,
    dependencies=[Depends(verify_token)],
)
async def clear_session(
    session_id: str = Path(..., min_length=5, max_length=200),
    user_id: str = Depends(get_user_id),
    store: CandidateRepositoryInterface = Depends(get_candidate_store),
):
    """Delete every candidate of one of the caller's sessions."""
    verify_session_ownership(session_id, user_id)
    result = await asyncio.to_thread(store.clear_session, session_id, user_id)
    logger.info(f"User {user_id} cleared session {session_id} ({result.deleted_count} candidates)")
    return ClearSessionResponse(session_id=session_id, deleted=result.deleted_count)
