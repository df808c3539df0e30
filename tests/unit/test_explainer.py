"""
Unit tests for src/matching/explainer.py
"""

import pytest
from tenacity import wait_none

from src.common.error_handling import ErrorCollector
from src.common.types import MatchResult
from src.matching.explainer import Explainer, is_negative_explanation
from src.matching.prompts import GENERIC_REASONING, GENERIC_RECOMMENDATION
from tests.helpers.fakes import FakeChatLLM, make_candidate


@pytest.fixture(autouse=True)
def no_retry_wait(mocker):
    """Skip the exponential backoff between chat retries."""
    mocker.patch.object(Explainer._invoke.retry, "wait", wait_none())


def _matches(*names):
    return [
        MatchResult.from_candidate(make_candidate(name, title="Contractor"), similarity=0.9 - i * 0.1)
        for i, name in enumerate(names)
    ]


# ===== TESTS: Negative phrase detection =====

class TestIsNegativeExplanation:
    @pytest.mark.parametrize("text", [
        "This is not a good match for the mission.",
        "Their background DOES NOT ALIGN with construction.",
        "Honestly a poor match.",
    ])
    def test_negative_phrases(self, text):
        assert is_negative_explanation(text)

    @pytest.mark.parametrize("text", [None, "", "A strong fit given 10 years in construction."])
    def test_positive_or_empty(self, text):
        assert not is_negative_explanation(text)


# ===== TESTS: explain() =====

class TestExplain:
    @pytest.mark.asyncio
    async def test_attaches_reasoning_in_order(self):
        llm = FakeChatLLM(responder=lambda prompt: "Fits: " + prompt.split("- Name: ")[1].split("\n")[0])
        explainer = Explainer(llm=llm)

        result = await explainer.explain("Find contractors", _matches("A", "B", "C"))

        assert [m.name for m in result] == ["A", "B", "C"]
        assert [m.reasoning for m in result] == ["Fits: A", "Fits: B", "Fits: C"]
        assert len(llm.calls) == 3

    @pytest.mark.asyncio
    async def test_prompt_contains_mission_and_similarity(self):
        llm = FakeChatLLM()
        explainer = Explainer(llm=llm)

        await explainer.explain("Find contractors", _matches("A"))

        system, user = llm.calls[0]
        assert "network analyst" in system.content
        assert "Mission: Find contractors" in user.content
        assert "Similarity Score: 90.0%" in user.content

    @pytest.mark.asyncio
    async def test_failure_uses_generic_reasoning(self):
        llm = FakeChatLLM(fail=True)
        errors = ErrorCollector()
        explainer = Explainer(llm=llm)

        result = await explainer.explain("Find contractors", _matches("A", "B"), errors=errors)

        assert [m.reasoning for m in result] == [GENERIC_REASONING, GENERIC_REASONING]
        assert errors.count("explainer") == 2
        # one retry per match
        assert len(llm.calls) == 4

    @pytest.mark.asyncio
    async def test_empty_reply_counts_as_failure(self):
        explainer = Explainer(llm=FakeChatLLM(responder=lambda prompt: "   "))

        result = await explainer.explain("Find contractors", _matches("A"))

        assert result[0].reasoning == GENERIC_REASONING

    @pytest.mark.asyncio
    async def test_original_matches_not_mutated(self):
        matches = _matches("A")
        await Explainer(llm=FakeChatLLM()).explain("Find contractors", matches)

        assert matches[0].reasoning is None

    @pytest.mark.asyncio
    async def test_lenient_mode_keeps_negative_explanations(self):
        explainer = Explainer(llm=FakeChatLLM(responder=lambda p: "Not a good match."))

        result = await explainer.explain("Find contractors", _matches("A", "B"))

        assert len(result) == 2

    @pytest.mark.asyncio
    async def test_strict_mode_drops_negative_explanations(self):
        def responder(prompt):
            return "Not relevant here." if "- Name: B" in prompt else "Great fit."

        explainer = Explainer(llm=FakeChatLLM(responder=responder), strict=True)

        result = await explainer.explain("Find contractors", _matches("A", "B", "C"))

        assert [m.name for m in result] == ["A", "C"]

    @pytest.mark.asyncio
    async def test_strict_mode_may_drop_everything(self):
        explainer = Explainer(llm=FakeChatLLM(responder=lambda p: "Poor match."), strict=True)

        assert await explainer.explain("Find contractors", _matches("A")) == []


# ===== TESTS: recommend() =====

class TestRecommend:
    @pytest.mark.asyncio
    async def test_uses_summary_client(self):
        llm = FakeChatLLM(responder=lambda p: "reasoning")
        summary = FakeChatLLM(responder=lambda p: "Start with A.")
        explainer = Explainer(llm=llm, summary_llm=summary)

        text = await explainer.recommend("Find contractors", _matches("A", "B"))

        assert text == "Start with A."
        assert llm.calls == []
        prompt = summary.calls[0][1].content
        assert "1. A - Contractor" in prompt
        assert "2. B - Contractor" in prompt

    @pytest.mark.asyncio
    async def test_failure_returns_generic_summary(self):
        errors = ErrorCollector()
        explainer = Explainer(llm=FakeChatLLM(fail=True))

        text = await explainer.recommend("Find contractors", _matches("A"), errors=errors)

        assert text == GENERIC_RECOMMENDATION
        assert errors.count("explainer") == 1

    @pytest.mark.asyncio
    async def test_no_matches_skips_model(self):
        llm = FakeChatLLM()
        explainer = Explainer(llm=llm)

        assert await explainer.recommend("Find contractors", []) == GENERIC_RECOMMENDATION
        assert llm.calls == []
