"""
Match Engine Configuration

Loads the tunables of the mission match pipeline (prefilter cap, embedding
batching, ranking thresholds, explanation mode, timeout) from environment
variables.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class MatchSettings:
    """Configuration for one run of the match engine."""

    # Prefilter (strict policy)
    prefilter_limit: int = 15

    # Embedding resolver
    embedding_batch_size: int = 10
    max_concurrent_batches: int = 5
    group_pause_seconds: float = 1.0
    max_consecutive_batch_failures: int = 3

    # Similarity ranker
    top_k: int = 6
    min_similarity: float = 0.1

    # Explanation generator
    strict_explanations: bool = False
    max_concurrent_explanations: int = 5

    # End-to-end timeout for a single search
    search_timeout_seconds: float = 300.0

    def __post_init__(self) -> None:
        if self.prefilter_limit < 1:
            raise ValueError("prefilter_limit must be >= 1")
        if self.embedding_batch_size < 1:
            raise ValueError("embedding_batch_size must be >= 1")
        if self.max_concurrent_batches < 1:
            raise ValueError("max_concurrent_batches must be >= 1")
        if self.max_consecutive_batch_failures < 1:
            raise ValueError("max_consecutive_batch_failures must be >= 1")
        if self.group_pause_seconds < 0:
            raise ValueError("group_pause_seconds must be >= 0")
        if self.top_k < 1:
            raise ValueError("top_k must be >= 1")
        if not 0.0 <= self.min_similarity <= 1.0:
            raise ValueError("min_similarity must be within [0, 1]")
        if self.search_timeout_seconds <= 0:
            raise ValueError("search_timeout_seconds must be > 0")

    @classmethod
    def from_env(cls) -> "MatchSettings":
        """
        Load configuration from environment variables.

        Environment variables:
            PREFILTER_LIMIT: Max candidates kept by the prefilter (default: 15)
            EMBEDDING_BATCH_SIZE: Candidates per embedding batch (default: 10)
            EMBEDDING_MAX_CONCURRENT_BATCHES: Batches per group (default: 5)
            EMBEDDING_GROUP_PAUSE_SECONDS: Pause between groups (default: 1.0)
            EMBEDDING_MAX_CONSECUTIVE_FAILURES: Abort threshold (default: 3)
            MATCH_TOP_K: Max matches returned (default: 6)
            MATCH_MIN_SIMILARITY: Cosine similarity floor (default: 0.1)
            STRICT_EXPLANATIONS: Drop matches the explainer flags (default: false)
            MAX_CONCURRENT_EXPLANATIONS: Parallel reasoning calls (default: 5)
            SEARCH_TIMEOUT_SECONDS: End-to-end timeout (default: 300)
        """
        def parse_bool(val: Optional[str], default: bool = False) -> bool:
            if not val:
                return default
            return val.lower() in ("true", "1", "yes", "on")

        def parse_int(val: Optional[str], default: int) -> int:
            if not val:
                return default
            try:
                return int(val)
            except ValueError:
                return default

        def parse_float(val: Optional[str], default: float) -> float:
            if not val:
                return default
            try:
                return float(val)
            except ValueError:
                return default

        return cls(
            prefilter_limit=parse_int(os.getenv("PREFILTER_LIMIT"), 15),
            embedding_batch_size=parse_int(os.getenv("EMBEDDING_BATCH_SIZE"), 10),
            max_concurrent_batches=parse_int(os.getenv("EMBEDDING_MAX_CONCURRENT_BATCHES"), 5),
            group_pause_seconds=parse_float(os.getenv("EMBEDDING_GROUP_PAUSE_SECONDS"), 1.0),
            max_consecutive_batch_failures=parse_int(
                os.getenv("EMBEDDING_MAX_CONSECUTIVE_FAILURES"), 3
            ),
            top_k=parse_int(os.getenv("MATCH_TOP_K"), 6),
            min_similarity=parse_float(os.getenv("MATCH_MIN_SIMILARITY"), 0.1),
            strict_explanations=parse_bool(os.getenv("STRICT_EXPLANATIONS"), False),
            max_concurrent_explanations=parse_int(os.getenv("MAX_CONCURRENT_EXPLANATIONS"), 5),
            search_timeout_seconds=parse_float(os.getenv("SEARCH_TIMEOUT_SECONDS"), 300.0),
        )
