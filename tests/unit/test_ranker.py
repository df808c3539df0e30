"""
Unit tests for src/matching/ranker.py
"""

import math

import pytest

from src.common.types import ScoredCandidate
from src.matching.ranker import (
    cosine_similarity,
    dedupe_candidates,
    fallback_matches,
    rank_candidates,
)
from tests.helpers.fakes import make_candidate


# ===== TESTS: cosine_similarity =====

class TestCosineSimilarity:
    def test_identical_vectors(self):
        assert cosine_similarity([0.3, 0.4, 0.5], [0.3, 0.4, 0.5]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)

    def test_symmetric(self):
        a, b = [0.1, 0.7, 0.2], [0.9, 0.1, 0.4]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_scale_invariant(self):
        a, b = [0.1, 0.7, 0.2], [0.9, 0.1, 0.4]
        scaled = [x * 12.5 for x in a]
        assert cosine_similarity(scaled, b) == pytest.approx(cosine_similarity(a, b))

    def test_zero_norm_returns_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="length mismatch"):
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])

    def test_result_is_plain_float(self):
        assert isinstance(cosine_similarity([1.0], [1.0]), float)


# ===== TESTS: rank_candidates =====

class TestRankCandidates:
    MISSION = [1.0, 0.0, 0.0]

    def test_sorted_descending_and_cut_to_k(self):
        candidates = [
            make_candidate(f"C{i}", embedding=[1.0, float(i), 0.0])
            for i in range(10)
        ]

        result = rank_candidates(self.MISSION, candidates, top_k=6, min_similarity=0.0)

        assert len(result) == 6
        sims = [m.similarity for m in result]
        assert sims == sorted(sims, reverse=True)
        assert result[0].name == "C0"

    def test_threshold_drops_low_similarity(self):
        close = make_candidate("Close", embedding=[1.0, 0.1, 0.0])
        far = make_candidate("Far", embedding=[0.0, 1.0, 0.0])

        result = rank_candidates(self.MISSION, [close, far], min_similarity=0.1)

        assert [m.name for m in result] == ["Close"]
        assert all(m.similarity >= 0.1 for m in result)

    def test_skips_candidates_without_embeddings(self):
        result = rank_candidates(self.MISSION, [make_candidate("NoVec")])
        assert result == []

    def test_dedup_keeps_first_seen_even_without_vector(self):
        first = make_candidate("Jane Doe", company="Acme")
        later = make_candidate(" jane doe ", company="ACME", embedding=[1.0, 0.0, 0.0], id="other")

        result = rank_candidates(self.MISSION, [first, later])

        # The first occurrence wins and it has no vector, so nothing ranks
        assert result == []

    def test_ties_keep_input_order(self):
        a = make_candidate("A", embedding=[2.0, 0.0, 0.0])
        b = make_candidate("B", embedding=[1.0, 0.0, 0.0])

        result = rank_candidates(self.MISSION, [a, b])

        assert [m.name for m in result] == ["A", "B"]

    def test_results_have_no_reasoning_and_no_vector(self):
        result = rank_candidates(self.MISSION, [make_candidate("A", embedding=[1.0, 0.0, 0.0])])

        assert result[0].reasoning is None
        assert result[0].is_fallback is False
        assert "embedding" not in result[0].model_dump()

    def test_empty_input(self):
        assert rank_candidates(self.MISSION, []) == []

    def test_skips_vectors_of_other_length(self):
        stale = make_candidate("Stale", embedding=[1.0, 0.0])
        fresh = make_candidate("Fresh", embedding=[1.0, 0.2, 0.0])

        result = rank_candidates(self.MISSION, [stale, fresh])

        assert [m.name for m in result] == ["Fresh"]

    def test_ranking_is_deterministic(self):
        candidates = [
            make_candidate("A", company="Acme", embedding=[1.0, 0.5, 0.0]),
            make_candidate("B", embedding=[1.0, 0.0, 0.0]),
            make_candidate("a", company="ACME", embedding=[0.0, 1.0, 0.0]),
            make_candidate("C", embedding=[1.0, 0.5, 0.0]),
            make_candidate("D", embedding=[0.2, 1.0, 0.0]),
        ]

        first = rank_candidates(self.MISSION, dedupe_candidates(candidates))
        second = rank_candidates(self.MISSION, dedupe_candidates(candidates))
        twice_deduped = rank_candidates(self.MISSION, dedupe_candidates(dedupe_candidates(candidates)))

        assert first == second == twice_deduped
        assert [m.name for m in first] == ["B", "A", "C", "D"]


class TestDedupeCandidates:
    def test_missing_company_uses_unknown(self):
        a = make_candidate("Sam")
        b = make_candidate("sam", company="  ")

        assert [c.id for c in dedupe_candidates([a, b])] == [a.id]


# ===== TESTS: fallback_matches =====

class TestFallbackMatches:
    def test_normalizes_text_score(self):
        scored = [
            ScoredCandidate(candidate=make_candidate("A"), text_score=6),
            ScoredCandidate(candidate=make_candidate("B"), text_score=14),
        ]

        result = fallback_matches(scored, top_k=6)

        assert [m.name for m in result] == ["B", "A"]
        assert result[0].similarity == 1.0
        assert math.isclose(result[1].similarity, 0.6)
        assert all(m.is_fallback for m in result)
        assert "text analysis" in result[1].reasoning
        assert "score: 6" in result[1].reasoning

    def test_respects_top_k(self):
        scored = [
            ScoredCandidate(candidate=make_candidate(f"C{i}"), text_score=i + 1)
            for i in range(10)
        ]
        assert len(fallback_matches(scored, top_k=3)) == 3
