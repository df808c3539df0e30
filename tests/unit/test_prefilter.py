"""
Unit tests for src/matching/prefilter.py

Tests the strict keyword prefilter:
- Industry detection and tie-breaking
- Per-candidate scoring (industry, role, domain, location)
- Exclusion of zero scores, ordering and the result cap
"""

import pytest

from src.matching.prefilter import (
    detect_primary_industry,
    keyword_present,
    prefilter_candidates,
    score_candidate,
    tokenize,
)
from tests.helpers.fakes import make_candidate


# ===== TESTS: Tokenizer =====

class TestTokenize:
    def test_drops_short_and_stop_words(self):
        tokens = tokenize("Looking for construction contractors in Texas")
        assert tokens == ["construction", "contractors", "texas"]

    def test_lowercases_and_dedupes(self):
        assert tokenize("Texas TEXAS texas builders") == ["texas", "builders"]

    def test_empty_text(self):
        assert tokenize("") == []


# ===== TESTS: Keyword matching =====

class TestKeywordPresent:
    def test_prefix_match_covers_plurals(self):
        assert keyword_present("contractor", "licensed contractors wanted")

    def test_no_mid_word_match(self):
        assert not keyword_present("lead", "misleading title")

    def test_short_keyword_needs_whole_word(self):
        assert keyword_present("ai", "applied ai research")
        assert not keyword_present("ai", "maintenance and aid")


# ===== TESTS: Primary industry detection =====

class TestDetectPrimaryIndustry:
    def test_detects_construction(self):
        assert detect_primary_industry("Looking for construction contractors in Texas") == "construction"

    def test_highest_count_wins(self):
        mission = "software developers for a cloud data startup, maybe a contractor"
        assert detect_primary_industry(mission) == "technology"

    def test_tie_goes_to_first_declared(self):
        # one construction hit, one technology hit
        assert detect_primary_industry("software for concrete") == "construction"

    def test_no_hits_returns_none(self):
        assert detect_primary_industry("Meet interesting people near me") is None


# ===== TESTS: Scoring =====

class TestScoreCandidate:
    def test_industry_role_and_location_points(self):
        candidate = make_candidate("A", title="General Contractor", company="BuildCo", location="Texas")
        tokens = tokenize("Looking for construction contractors in Texas")

        # contractor: +3 industry, +2 role; texas: +1 location
        assert score_candidate(candidate, tokens, "construction") == 6

    def test_unrelated_candidate_scores_zero(self):
        candidate = make_candidate("B", title="Barista", company="Cafe")
        tokens = tokenize("Looking for construction contractors in Texas")

        assert score_candidate(candidate, tokens, "construction") == 0

    def test_location_match_is_bidirectional(self):
        candidate = make_candidate("C", title="Barista", location="Austin, Texas")
        assert score_candidate(candidate, ["texas"], None) == 1

        short_location = make_candidate("D", title="Barista", location="york")
        assert score_candidate(short_location, ["yorkshire"], None) == 1

    def test_domain_keywords_score(self):
        candidate = make_candidate("E", title="Operations", company="Acme Business Services")
        # operations, business, services
        assert score_candidate(candidate, [], None) == 6


# ===== TESTS: prefilter_candidates =====

class TestPrefilterCandidates:
    def test_contractor_scenario(self):
        a = make_candidate("A", title="General Contractor", company="BuildCo", location="Texas")
        b = make_candidate("B", title="Barista", company="Cafe")

        result = prefilter_candidates("Looking for construction contractors in Texas", [a, b])

        assert [s.candidate.name for s in result] == ["A"]
        assert result[0].text_score > 0

    def test_every_result_scores_above_zero_and_cap_holds(self):
        candidates = [make_candidate(f"P{i}", title="Project Manager") for i in range(20)]
        candidates.append(make_candidate("Z", title="Barista"))

        result = prefilter_candidates("Looking for construction contractors", candidates, limit=15)

        assert len(result) == 15
        assert all(s.text_score > 0 for s in result)
        assert "Z" not in {s.candidate.name for s in result}

    def test_sorted_descending_with_stable_ties(self):
        low = make_candidate("Low", title="Manager")
        high = make_candidate("High", title="Senior Construction Manager")
        tie = make_candidate("Tie", title="Director")

        result = prefilter_candidates("construction partners", [low, high, tie])

        assert [s.candidate.name for s in result] == ["High", "Low", "Tie"]

    def test_no_industry_still_uses_role_and_location(self):
        mentor = make_candidate("M", title="Senior Advisor", location="Denver")
        other = make_candidate("N", title="Barista", location="Boston")

        result = prefilter_candidates("Mentor relationships in Denver", [mentor, other])

        assert [s.candidate.name for s in result] == ["M"]
        assert result[0].text_score == 3

    def test_empty_candidate_list(self):
        assert prefilter_candidates("construction partners", []) == []

    def test_invalid_limit_rejected(self):
        with pytest.raises(ValueError):
            prefilter_candidates("construction partners", [], limit=0)
