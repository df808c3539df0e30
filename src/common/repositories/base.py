"""
Repository Interface Definitions

Defines the abstract interface for candidate store operations.
The match engine depends only on this interface, so the MongoDB-backed
implementation can be swapped for an in-memory fake in tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List

from src.common.types import Candidate


@dataclass
class WriteResult:
    """
    Result of a write operation.

    Attributes:
        matched_count: Number of documents that matched the filter
        modified_count: Number of documents actually modified
        upserted_count: Number of documents created by upserts
        deleted_count: Number of documents removed
    """
    matched_count: int = 0
    modified_count: int = 0
    upserted_count: int = 0
    deleted_count: int = 0


class CandidateRepositoryInterface(ABC):
    """
    Abstract interface for the candidates collection.

    Every candidate is owned by exactly one (user_id, session_id) pair and is
    identified by its candidate_key. Uniqueness of candidate_key is enforced
    by the store, so concurrent imports cannot create duplicates.

    All methods follow fail-fast semantics: errors propagate to the caller.
    """

    @abstractmethod
    def get_by_session(self, session_id: str, user_id: str) -> List[Candidate]:
        """
        Load every candidate of one session owned by one user.

        Args:
            session_id: Upload session identifier
            user_id: Owning user identifier

        Returns:
            Candidates in insertion order (empty list if none)
        """
        pass

    @abstractmethod
    def persist_embeddings(
        self,
        user_id: str,
        vectors: Dict[str, List[float]],
    ) -> WriteResult:
        """
        Store computed embedding vectors.

        Args:
            user_id: Owning user (guards against cross-user writes)
            vectors: Mapping of candidate_key -> embedding vector

        Returns:
            WriteResult with match/modify counts
        """
        pass

    @abstractmethod
    def upsert_candidates(
        self,
        user_id: str,
        session_id: str,
        candidates: List[Candidate],
        reset_embeddings: bool = False,
    ) -> WriteResult:
        """
        Insert or update candidates keyed by candidate_key.

        Args:
            user_id: Owning user
            session_id: Target upload session
            candidates: Records to store; ownership fields are overwritten
            reset_embeddings: Drop stored vectors (record content changed)

        Returns:
            WriteResult with upserted/modified counts
        """
        pass

    @abstractmethod
    def clear_session(self, session_id: str, user_id: str) -> WriteResult:
        """
        Delete every candidate of a session owned by the user.

        Returns:
            WriteResult with deleted_count set
        """
        pass

    @abstractmethod
    def ensure_indexes(self) -> None:
        """Ensure required indexes exist (including the unique key index)."""
        pass

    def ping(self) -> bool:
        """Connectivity check used by the health endpoint."""
        return True


class SearchHistoryRepositoryInterface(ABC):
    """
    Abstract interface for archived searches, stored per user.
    """

    @abstractmethod
    def append(self, user_id: str, record: Dict) -> bool:
        """
        Archive one search result under the user.

        Args:
            user_id: Owning user
            record: {"mission", "matches", "recommendation"}

        Returns:
            True if archived, False if skipped as a recent duplicate
        """
        pass

    @abstractmethod
    def get_history(self, user_id: str, limit: int = 20) -> List[Dict]:
        """
        Return the user's archived searches, newest first.
        """
        pass

    def ensure_indexes(self) -> None:
        """Ensure required indexes exist."""
        pass
