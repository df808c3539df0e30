"""
Repository Configuration and Factory

Provides factory functions to get the repository implementations
based on environment configuration.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from .base import CandidateRepositoryInterface, SearchHistoryRepositoryInterface

logger = logging.getLogger(__name__)


@dataclass
class RepositoryConfig:
    """
    Configuration for repository initialization.

    Loaded from environment variables with sensible defaults.
    """
    mongodb_uri: str
    database: str = "linkedin_network_analysis"
    candidates_collection: str = "profiles"
    users_collection: str = "users"
    history_retention: int = 100

    @classmethod
    def from_env(cls) -> "RepositoryConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - MONGODB_URI (required): MongoDB connection string
        - MONGO_DB_NAME: Database name
        - CANDIDATES_COLLECTION: Candidate collection name
        - USERS_COLLECTION: User/history collection name
        - HISTORY_RETENTION: Archived searches kept per user

        Raises:
            ValueError: If MONGODB_URI is not set
        """
        mongodb_uri = os.getenv("MONGODB_URI")
        if not mongodb_uri:
            raise ValueError("MONGODB_URI environment variable is required")

        return cls(
            mongodb_uri=mongodb_uri,
            database=os.getenv("MONGO_DB_NAME", "linkedin_network_analysis"),
            candidates_collection=os.getenv("CANDIDATES_COLLECTION", "profiles"),
            users_collection=os.getenv("USERS_COLLECTION", "users"),
            history_retention=int(os.getenv("HISTORY_RETENTION", "100")),
        )


# Singleton repository instances
_candidate_repository: Optional[CandidateRepositoryInterface] = None
_history_repository: Optional[SearchHistoryRepositoryInterface] = None


def get_candidate_repository() -> CandidateRepositoryInterface:
    """
    Get the candidate repository instance.

    Uses singleton pattern for connection pooling.

    Raises:
        ValueError: If MongoDB URI is not configured
    """
    global _candidate_repository

    if _candidate_repository is None:
        config = RepositoryConfig.from_env()
        from .candidate_repository import AtlasCandidateRepository
        _candidate_repository = AtlasCandidateRepository(
            mongodb_uri=config.mongodb_uri,
            database=config.database,
            collection=config.candidates_collection,
        )
        logger.info("Initialized Atlas candidate repository")

    return _candidate_repository


def reset_candidate_repository() -> None:
    """Reset the candidate repository singleton (testing or config change)."""
    global _candidate_repository

    if _candidate_repository is not None:
        from .candidate_repository import AtlasCandidateRepository
        if isinstance(_candidate_repository, AtlasCandidateRepository):
            AtlasCandidateRepository.reset_connection()

    _candidate_repository = None
    logger.info("Candidate repository singleton reset")


def get_search_history_repository() -> SearchHistoryRepositoryInterface:
    """Get the search history repository instance."""
    global _history_repository

    if _history_repository is None:
        config = RepositoryConfig.from_env()
        from .search_history_repository import AtlasSearchHistoryRepository
        _history_repository = AtlasSearchHistoryRepository(
            mongodb_uri=config.mongodb_uri,
            database=config.database,
            collection=config.users_collection,
            max_entries=config.history_retention,
        )
        logger.info("Initialized Atlas search history repository")

    return _history_repository


def reset_search_history_repository() -> None:
    """Reset the search history repository singleton."""
    global _history_repository

    if _history_repository is not None:
        from .search_history_repository import AtlasSearchHistoryRepository
        if isinstance(_history_repository, AtlasSearchHistoryRepository):
            AtlasSearchHistoryRepository.reset_connection()

    _history_repository = None
    logger.info("Search history repository singleton reset")
