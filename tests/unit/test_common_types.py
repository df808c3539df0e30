"""
Unit tests for src/common/types.py and src/common/dedupe.py
"""

import pytest
from pydantic import ValidationError

from src.common.dedupe import (
    generate_candidate_key,
    generate_dedupe_key,
    normalize_key_part,
)
from src.common.types import (
    NOT_SPECIFIED,
    Candidate,
    MatchResult,
    MissionAttributes,
)


# ===== TESTS: Composite keys =====

class TestDedupeKeys:
    def test_normalize(self):
        assert normalize_key_part("  McKinsey & Company ") == "mckinsey & company"
        assert normalize_key_part(None) == ""

    def test_dedupe_key(self):
        assert generate_dedupe_key("  Jane Doe ", "BuildCo") == "jane doe|buildco"
        assert generate_dedupe_key("Jane Doe", None) == "jane doe|unknown"

    def test_punctuation_is_significant(self):
        assert generate_dedupe_key("O'Neil") != generate_dedupe_key("ONeil")

    def test_candidate_key_is_session_scoped(self):
        first = generate_candidate_key("u1", "upload-u1-1", "Jane", "Acme")
        second = generate_candidate_key("u1", "upload-u1-2", "Jane", "Acme")

        assert first == "u1|upload-u1-1|jane|acme"
        assert first != second


# ===== TESTS: Candidate =====

class TestCandidate:
    def test_name_is_stripped_and_required(self):
        assert Candidate(id="1", name="  Jane ").name == "Jane"
        with pytest.raises(ValidationError):
            Candidate(id="1", name="   ")

    def test_empty_embedding_means_missing(self):
        candidate = Candidate(id="1", name="Jane", embedding=[])

        assert candidate.embedding is None
        assert candidate.has_embedding is False

    def test_keys(self):
        candidate = Candidate(id="1", name="Jane", company="Acme", user_id="u1", session_id="s1")

        assert candidate.dedupe_key == "jane|acme"
        assert candidate.candidate_key == "u1|s1|jane|acme"

    def test_unknown_fields_ignored(self):
        candidate = Candidate(id="1", name="Jane", uploaded_at="x", last_updated="y")
        assert candidate.name == "Jane"

    def test_public_fields_hide_vector_and_owner(self):
        fields = Candidate(id="1", name="Jane", embedding=[1.0], user_id="u1").public_fields()

        assert "embedding" not in fields
        assert "user_id" not in fields
        assert "session_id" not in fields


# ===== TESTS: MissionAttributes =====

class TestMissionAttributes:
    def test_defaults(self):
        attributes = MissionAttributes()
        assert attributes.industry == NOT_SPECIFIED
        assert attributes.description == NOT_SPECIFIED

    def test_blank_values_become_not_specified(self):
        attributes = MissionAttributes(industry="  ", location=None, role=" Contractor ")

        assert attributes.industry == NOT_SPECIFIED
        assert attributes.location == NOT_SPECIFIED
        assert attributes.role == "Contractor"


# ===== TESTS: MatchResult =====

class TestMatchResult:
    def test_from_candidate(self):
        candidate = Candidate(id="1", name="Jane", title="Builder", embedding=[0.1])

        match = MatchResult.from_candidate(candidate, similarity=0.82)

        assert match.name == "Jane"
        assert match.title == "Builder"
        assert match.similarity == 0.82
        assert match.reasoning is None
        assert match.is_fallback is False

    def test_frozen(self):
        match = MatchResult(id="1", name="Jane", similarity=0.5)
        with pytest.raises(ValidationError):
            match.similarity = 0.9

    @pytest.mark.parametrize("similarity", [-0.1, 1.01])
    def test_similarity_bounds(self, similarity):
        with pytest.raises(ValidationError):
            MatchResult(id="1", name="Jane", similarity=similarity)
