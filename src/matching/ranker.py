"""
Similarity Ranker

Cosine ranking of embedded candidates against the mission vector, plus the
text-score fallback used when no candidate could be embedded at all.
"""

import logging
from typing import List, Sequence

import numpy as np

from src.common.types import Candidate, MatchResult, ScoredCandidate

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 6
DEFAULT_MIN_SIMILARITY = 0.1
# Prefilter scores are divided by this to look like a similarity
FALLBACK_SCORE_SCALE = 10.0


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when either vector has zero norm.

    Raises:
        ValueError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise ValueError(f"Vector length mismatch: {len(a)} != {len(b)}")

    vec_a = np.asarray(a, dtype=float)
    vec_b = np.asarray(b, dtype=float)
    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / (norm_a * norm_b))


def dedupe_candidates(candidates: List[Candidate]) -> List[Candidate]:
    """Keep the first-seen candidate per (name, company) key, in input order."""
    seen = set()
    unique = []
    for candidate in candidates:
        key = candidate.dedupe_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def rank_candidates(
    mission_vector: Sequence[float],
    candidates: List[Candidate],
    top_k: int = DEFAULT_TOP_K,
    min_similarity: float = DEFAULT_MIN_SIMILARITY,
) -> List[MatchResult]:
    """
    Rank candidates by cosine similarity to the mission.

    Duplicates are removed first (first-seen wins, even when only a later
    duplicate carries a vector). Candidates without a vector of the mission's
    length are skipped and scores below ``min_similarity`` are dropped. The
    rest is sorted descending (ties keep input order) and cut to ``top_k``.

    Returns:
        MatchResults without reasoning
    """
    unique = dedupe_candidates(candidates)

    scored = []
    skipped = 0
    for candidate in unique:
        if not candidate.has_embedding:
            skipped += 1
            continue
        if len(candidate.embedding) != len(mission_vector):
            logger.warning(
                f"Skipping {candidate.name}: vector has {len(candidate.embedding)} dimensions, "
                f"mission has {len(mission_vector)}"
            )
            skipped += 1
            continue
        similarity = cosine_similarity(mission_vector, candidate.embedding)
        if similarity < min_similarity:
            continue
        scored.append((candidate, min(1.0, similarity)))

    scored.sort(key=lambda pair: pair[1], reverse=True)
    top = scored[:top_k]
    logger.info(
        f"Ranked {len(unique)} unique candidates: {len(scored)} above threshold, "
        f"{skipped} without usable embeddings, returning {len(top)}"
    )
    return [MatchResult.from_candidate(candidate, similarity) for candidate, similarity in top]


def fallback_matches(scored: List[ScoredCandidate], top_k: int = DEFAULT_TOP_K) -> List[MatchResult]:
    """
    Top candidates by prefilter text score, for when no embeddings exist.

    The similarity is the text score scaled down by 10 (capped at 1.0) and
    every result is flagged ``is_fallback``.
    """
    ordered = sorted(scored, key=lambda s: s.text_score, reverse=True)

    results = []
    seen = set()
    for item in ordered:
        key = item.candidate.dedupe_key
        if key in seen:
            continue
        seen.add(key)
        results.append(
            MatchResult.from_candidate(
                item.candidate,
                similarity=min(1.0, item.text_score / FALLBACK_SCORE_SCALE),
                reasoning=(
                    f"This profile matches based on text analysis "
                    f"(score: {item.text_score:g})"
                ),
                is_fallback=True,
            )
        )
        if len(results) >= top_k:
            break
    return results
