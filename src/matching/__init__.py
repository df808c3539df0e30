"""
Mission Match Engine

Ranks a user's uploaded contacts against a free-text networking mission:
keyword prefilter, embedding resolution, cosine ranking and LLM explanations.
"""

from .engine import MatchEngine
from .prefilter import detect_primary_industry, prefilter_candidates
from .ranker import cosine_similarity, fallback_matches, rank_candidates

__all__ = [
    "MatchEngine",
    "prefilter_candidates",
    "detect_primary_industry",
    "cosine_similarity",
    "rank_candidates",
    "fallback_matches",
]
