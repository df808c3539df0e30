"""
Canonical Types and Schemas for the Mission Match Engine

This module defines the data structures passed between the engine stages:
Candidate (one stored contact), MissionAttributes (structured view of the
user's goal), MatchResult (one ranked output row) and the search response
with its diagnostics.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.common.dedupe import generate_candidate_key, generate_dedupe_key

NOT_SPECIFIED = "Not specified"


class Candidate(BaseModel):
    """
    One professional contact owned by a (user, session) pair.

    The embedding is the only field mutated after creation; it is filled in
    lazily the first time the candidate survives the prefilter.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
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
    embedding: Optional[List[float]] = None
    user_id: str = ""
    session_id: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Candidate name must not be empty")
        return v

    @field_validator("embedding")
    @classmethod
    def normalize_empty_embedding(cls, v: Optional[List[float]]) -> Optional[List[float]]:
        # An empty list means "not computed yet"
        return v or None

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    @property
    def dedupe_key(self) -> str:
        return generate_dedupe_key(self.name, self.company)

    @property
    def candidate_key(self) -> str:
        return generate_candidate_key(self.user_id, self.session_id, self.name, self.company)

    def public_fields(self) -> Dict[str, Any]:
        """Fields safe to return to the caller (no vector, no ownership ids)."""
        return self.model_dump(exclude={"embedding", "user_id", "session_id"})


class MissionAttributes(BaseModel):
    """Structured attributes derived upstream from the raw mission text."""

    industry: str = NOT_SPECIFIED
    location: str = NOT_SPECIFIED
    role: str = NOT_SPECIFIED
    description: str = NOT_SPECIFIED

    @field_validator("industry", "location", "role", "description", mode="before")
    @classmethod
    def default_blank(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return NOT_SPECIFIED
        return str(v).strip()


class ScoredCandidate(BaseModel):
    """A candidate paired with its prefilter text score."""

    candidate: Candidate
    text_score: float


class MatchResult(BaseModel):
    """One ranked output row; never mutated after construction."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
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
    similarity: float = Field(..., ge=0.0, le=1.0)
    reasoning: Optional[str] = None
    is_fallback: bool = False

    @classmethod
    def from_candidate(
        cls,
        candidate: Candidate,
        similarity: float,
        reasoning: Optional[str] = None,
        is_fallback: bool = False,
    ) -> "MatchResult":
        return cls(
            **candidate.public_fields(),
            similarity=similarity,
            reasoning=reasoning,
            is_fallback=is_fallback,
        )


class SearchDiagnostics(BaseModel):
    """Counts describing one search, without exposing thresholds."""

    total_candidates: int = 0
    prefiltered_candidates: int = 0
    candidates_with_embeddings: int = 0
    embeddings_computed: int = 0
    embedding_failures: int = 0
    final_matches: int = 0
    duration_ms: int = 0
    errors: Dict[str, Any] = Field(default_factory=dict)


class SearchResponse(BaseModel):
    """Result of MatchEngine.search."""

    success: bool = True
    message: str
    matches: List[MatchResult]
    recommendation: str
    is_fallback: bool = False
    diagnostics: SearchDiagnostics
