"""
Explanation Generator

Attaches a short natural-language justification to each ranked match and
produces one recommendation summary for the whole result list.

Chat calls are retried once (tenacity) and then replaced by a generic
string, so an explanation failure never fails the search. In strict mode
matches whose explanation argues against the match are dropped.
"""

import asyncio
from typing import Any, List, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from tenacity import retry, stop_after_attempt, wait_exponential

from src.common.config import Config
from src.common.error_handling import ErrorCollector
from src.common.llm_factory import create_chat_llm
from src.common.logger import get_logger
from src.common.types import MatchResult

from .prompts import (
    GENERIC_REASONING,
    GENERIC_RECOMMENDATION,
    SYSTEM_PROMPT_REASONING,
    SYSTEM_PROMPT_RECOMMENDATION,
    build_reasoning_prompt,
    build_recommendation_prompt,
)

STAGE = "explainer"

REASONING_MAX_TOKENS = 150
RECOMMENDATION_MAX_TOKENS = 200

NEGATIVE_PHRASES = (
    "not a good match",
    "not a strong match",
    "not a relevant match",
    "does not align",
    "doesn't align",
    "not relevant",
    "should be excluded",
    "not suitable",
    "poor match",
    "no clear connection",
)


def is_negative_explanation(text: Optional[str]) -> bool:
    """True when the explanation argues against the match (case-insensitive)."""
    if not text:
        return False
    lowered = text.lower()
    return any(phrase in lowered for phrase in NEGATIVE_PHRASES)


def _content(response: Any) -> str:
    content = getattr(response, "content", response)
    return str(content or "").strip()


class Explainer:
    """
    Generates per-match reasoning and a recommendation summary.

    Args:
        llm: Chat model for reasoning (created from Config when omitted)
        summary_llm: Chat model for the summary (defaults to a 200-token client, or llm)
        max_concurrency: Upper bound on simultaneous reasoning calls
        strict: Drop matches with negative explanations
    """

    def __init__(
        self,
        llm: Any = None,
        summary_llm: Any = None,
        max_concurrency: int = 5,
        strict: bool = False,
        search_id: Optional[str] = None,
    ):
        self.llm = llm or create_chat_llm(
            temperature=Config.CREATIVE_TEMPERATURE,
            max_tokens=REASONING_MAX_TOKENS,
        )
        if summary_llm is None and llm is not None:
            summary_llm = llm
        self.summary_llm = summary_llm or create_chat_llm(
            temperature=Config.CREATIVE_TEMPERATURE,
            max_tokens=RECOMMENDATION_MAX_TOKENS,
        )
        self.strict = strict
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self.logger = get_logger(__name__, search_id=search_id, stage=STAGE)

    @retry(stop=stop_after_attempt(2), wait=wait_exponential(min=1, max=5))
    async def _invoke(self, llm: Any, system_prompt: str, user_prompt: str) -> str:
        response = await llm.ainvoke([
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt),
        ])
        text = _content(response)
        if not text:
            raise ValueError("Empty response from chat model")
        return text

    async def _reason(self, mission: str, match: MatchResult, errors: ErrorCollector) -> MatchResult:
        async with self._semaphore:
            try:
                reasoning = await self._invoke(
                    self.llm,
                    SYSTEM_PROMPT_REASONING,
                    build_reasoning_prompt(mission, match),
                )
            except Exception as e:
                self.logger.warning(f"Reasoning failed for {match.name}, using generic text: {e}")
                errors.add_error(STAGE, "explain_match", str(e), severity="low", exception=e)
                reasoning = GENERIC_REASONING
        return match.model_copy(update={"reasoning": reasoning})

    async def explain(
        self,
        mission: str,
        matches: List[MatchResult],
        errors: Optional[ErrorCollector] = None,
    ) -> List[MatchResult]:
        """
        Attach reasoning to each match, preserving order.

        In strict mode matches with negative reasoning are removed; the
        returned list may then be empty.
        """
        errors = errors if errors is not None else ErrorCollector()
        explained = await asyncio.gather(*(self._reason(mission, m, errors) for m in matches))

        if not self.strict:
            return list(explained)

        kept = [m for m in explained if not is_negative_explanation(m.reasoning)]
        dropped = len(explained) - len(kept)
        if dropped:
            self.logger.info(f"Strict mode dropped {dropped} negatively explained matches")
        return kept

    async def recommend(
        self,
        mission: str,
        matches: List[MatchResult],
        errors: Optional[ErrorCollector] = None,
    ) -> str:
        """One short summary of the result list; generic text on failure."""
        if not matches:
            return GENERIC_RECOMMENDATION
        try:
            return await self._invoke(
                self.summary_llm,
                SYSTEM_PROMPT_RECOMMENDATION,
                build_recommendation_prompt(mission, matches),
            )
        except Exception as e:
            self.logger.warning(f"Recommendation failed, using generic summary: {e}")
            if errors is not None:
                errors.add_error(STAGE, "recommend", str(e), severity="low", exception=e)
            return GENERIC_RECOMMENDATION
