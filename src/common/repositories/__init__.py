"""
Repository Pattern for MongoDB Operations

Provides an abstraction layer over MongoDB so the match engine can run
against an in-memory fake in tests.

Public API:
- get_candidate_repository(): Factory to get candidate repository instance
- get_search_history_repository(): Factory to get history repository instance
- CandidateRepositoryInterface: Abstract interface for the candidates collection
- SearchHistoryRepositoryInterface: Abstract interface for archived searches
- WriteResult: Result dataclass for write operations

Usage:
    from src.common.repositories import get_candidate_repository

    repo = get_candidate_repository()
    candidates = repo.get_by_session(session_id, user_id)
"""

from .base import (
    CandidateRepositoryInterface,
    SearchHistoryRepositoryInterface,
    WriteResult,
)
from .config import (
    get_candidate_repository,
    reset_candidate_repository,
    get_search_history_repository,
    reset_search_history_repository,
    RepositoryConfig,
)

__all__ = [
    "get_candidate_repository",
    "reset_candidate_repository",
    "CandidateRepositoryInterface",
    "get_search_history_repository",
    "reset_search_history_repository",
    "SearchHistoryRepositoryInterface",
    "WriteResult",
    "RepositoryConfig",
]
