"""
Match Engine

Orchestrates one search: load the session's candidates, prefilter them,
resolve embeddings, rank, and explain. The whole run is bounded by the
configured search timeout.

Usage:
    engine = MatchEngine(store=get_candidate_repository())
    response = await engine.search(mission, session_id, user_id, attributes)
"""

import asyncio
import time
import uuid
from typing import Any, List, Optional

from src.common.config import Config
from src.common.error_handling import (
    ConfigurationError,
    EmptyInputError,
    ErrorCollector,
    NoMatchesError,
    SearchTimeoutError,
)
from src.common.llm_factory import create_chat_llm, create_embeddings
from src.common.logger import get_logger
from src.common.match_config import MatchSettings
from src.common.repositories.base import CandidateRepositoryInterface
from src.common.structured_logger import StageContext, StageStatus, get_structured_logger
from src.common.types import (
    MatchResult,
    MissionAttributes,
    SearchDiagnostics,
    SearchResponse,
)

from .embedding_resolver import EmbeddingResolver
from .explainer import REASONING_MAX_TOKENS, RECOMMENDATION_MAX_TOKENS, Explainer
from .prefilter import prefilter_candidates
from .prompts import FALLBACK_MESSAGE, FALLBACK_RECOMMENDATION
from .ranker import fallback_matches, rank_candidates

NO_MATCHES_MESSAGE = "No relevant matches found for this mission"


class MatchEngine:
    """
    Runs the prefilter -> resolver -> ranker -> explainer pipeline.

    Model clients are created from Config unless injected. Missing provider
    credentials raise ConfigurationError here and again at search start.
    """

    def __init__(
        self,
        store: CandidateRepositoryInterface,
        settings: Optional[MatchSettings] = None,
        embeddings: Any = None,
        chat_llm: Any = None,
        summary_llm: Any = None,
        supports_batch_embeddings: bool = True,
    ):
        self.store = store
        self.settings = settings or MatchSettings.from_env()
        self._uses_config_clients = embeddings is None or chat_llm is None

        self.embeddings = embeddings or create_embeddings()
        self.chat_llm = chat_llm or create_chat_llm(
            temperature=Config.CREATIVE_TEMPERATURE,
            max_tokens=REASONING_MAX_TOKENS,
        )
        self.summary_llm = summary_llm or (
            chat_llm if chat_llm is not None else create_chat_llm(
                temperature=Config.CREATIVE_TEMPERATURE,
                max_tokens=RECOMMENDATION_MAX_TOKENS,
            )
        )
        self.supports_batch_embeddings = supports_batch_embeddings
        self.logger = get_logger(__name__, stage="engine")

    def _check_credentials(self) -> None:
        if self._uses_config_clients and not Config.has_llm_credentials():
            raise ConfigurationError(
                "LLM provider configuration missing",
                details="Set OPENAI_API_KEY or AZURE_OPENAI_API_KEY and AZURE_OPENAI_ENDPOINT",
            )

    async def search(
        self,
        mission: str,
        session_id: str,
        user_id: str,
        attributes: Optional[MissionAttributes] = None,
        timeout: Optional[float] = None,
    ) -> SearchResponse:
        """
        Rank the session's candidates against the mission.

        ``timeout`` overrides the configured search timeout, for callers that
        already spent part of the budget (mission parsing).

        Raises:
            EmptyInputError: Blank mission or a session without candidates
            ConfigurationError: Provider credentials missing
            EmbeddingProviderError: The mission could not be embedded
            NoMatchesError: Nothing relevant survived the pipeline
            SearchTimeoutError: The search deadline expired
        """
        mission = (mission or "").strip()
        if not mission:
            raise EmptyInputError("Mission is required")
        self._check_credentials()

        search_id = uuid.uuid4().hex
        if timeout is None:
            timeout = self.settings.search_timeout_seconds
        try:
            return await asyncio.wait_for(
                self._run(search_id, mission, session_id, user_id, attributes or MissionAttributes()),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            self.logger.bind(search_id=search_id).error(f"✗ Search timed out after {timeout:g}s")
            raise SearchTimeoutError(
                f"Search timed out after {timeout:g} seconds",
                details="Computed embeddings were saved; retrying will be faster",
            )

    async def _run(
        self,
        search_id: str,
        mission: str,
        session_id: str,
        user_id: str,
        attributes: MissionAttributes,
    ) -> SearchResponse:
        log = self.logger.bind(search_id=search_id)
        events = get_structured_logger(search_id)
        errors = ErrorCollector()
        diagnostics = SearchDiagnostics()
        start = time.time()

        events.search_start({"session_id": session_id})
        log.info(f"Search started for session {session_id}")

        candidates = await asyncio.to_thread(self.store.get_by_session, session_id, user_id)
        diagnostics.total_candidates = len(candidates)
        if not candidates:
            raise EmptyInputError(
                "No candidates found for this session",
                details="Upload contacts before searching",
            )

        with StageContext(events, "prefilter") as stage:
            scored = prefilter_candidates(mission, candidates, limit=self.settings.prefilter_limit)
            stage.add_metadata("kept", len(scored))
        diagnostics.prefiltered_candidates = len(scored)
        if not scored:
            raise NoMatchesError(NO_MATCHES_MESSAGE, details="No candidate matched the mission keywords")

        resolver = EmbeddingResolver(
            self.embeddings,
            store=self.store,
            settings=self.settings,
            supports_batch=self.supports_batch_embeddings,
            search_id=search_id,
        )
        with StageContext(events, "resolver") as stage:
            mission_vector = await resolver.embed_mission(mission, attributes)
            report = await resolver.resolve(
                [s.candidate for s in scored],
                expected_dimension=len(mission_vector),
                errors=errors,
            )
            stage.add_metadata("computed", report.computed)
            stage.add_metadata("failed", report.failed)
            if report.failed:
                stage.status = StageStatus.FALLBACK.value
        diagnostics.candidates_with_embeddings = report.with_embeddings
        diagnostics.embeddings_computed = report.computed
        diagnostics.embedding_failures = report.failed

        explainer = Explainer(
            llm=self.chat_llm,
            summary_llm=self.summary_llm,
            max_concurrency=self.settings.max_concurrent_explanations,
            strict=self.settings.strict_explanations,
            search_id=search_id,
        )

        if report.with_embeddings == 0:
            log.warning("✗ No candidate embeddings available, falling back to text scores")
            matches = fallback_matches(scored, top_k=self.settings.top_k)
            response = self._build_response(
                FALLBACK_MESSAGE, matches, FALLBACK_RECOMMENDATION, True, diagnostics, errors, start
            )
            events.search_complete("fallback", diagnostics.duration_ms, diagnostics.model_dump())
            return response

        with StageContext(events, "ranker") as stage:
            ranked = rank_candidates(
                mission_vector,
                report.candidates,
                top_k=self.settings.top_k,
                min_similarity=self.settings.min_similarity,
            )
            stage.add_metadata("ranked", len(ranked))
        if not ranked:
            raise NoMatchesError(NO_MATCHES_MESSAGE, details="No candidate was similar enough")

        with StageContext(events, "explainer") as stage:
            explained = await explainer.explain(mission, ranked, errors=errors)
            stage.add_metadata("kept", len(explained))
            if not explained:
                raise NoMatchesError(NO_MATCHES_MESSAGE, details="All matches were judged irrelevant")
            recommendation = await explainer.recommend(mission, explained, errors=errors)

        response = self._build_response(
            f"Found {len(explained)} relevant matches",
            explained,
            recommendation,
            False,
            diagnostics,
            errors,
            start,
        )
        events.search_complete("success", diagnostics.duration_ms, diagnostics.model_dump())
        log.info(f"✓ Search complete: {len(explained)} matches in {diagnostics.duration_ms}ms")
        return response

    @staticmethod
    def _build_response(
        message: str,
        matches: List[MatchResult],
        recommendation: str,
        is_fallback: bool,
        diagnostics: SearchDiagnostics,
        errors: ErrorCollector,
        start: float,
    ) -> SearchResponse:
        diagnostics.final_matches = len(matches)
        diagnostics.duration_ms = int((time.time() - start) * 1000)
        if errors.count():
            diagnostics.errors = errors.summary()
        return SearchResponse(
            message=message,
            matches=matches,
            recommendation=recommendation,
            is_fallback=is_fallback,
            diagnostics=diagnostics,
        )
