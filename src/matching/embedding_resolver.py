"""
Embedding Resolver

Guarantees that the mission and every prefiltered candidate carry an
embedding vector before ranking, computing only the missing ones.

Missing candidate vectors are computed in batches; a group of batches runs
concurrently, the next group starts only after the whole group finished
(with a short pause in between). New vectors are written back to the
candidate store after each batch, so a search that times out still leaves
its finished work behind and a retry skips those candidates.

Individual provider failures never abort the search: the affected
candidates simply proceed without a vector. After several consecutive
batches fail outright the resolver stops starting new groups.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.common.error_handling import (
    ConfigurationError,
    EmbeddingProviderError,
    ErrorCollector,
)
from src.common.logger import get_logger
from src.common.match_config import MatchSettings
from src.common.repositories.base import CandidateRepositoryInterface
from src.common.types import Candidate, MissionAttributes

STAGE = "resolver"


def _is_usable(candidate: Candidate, dimension: int) -> bool:
    return candidate.has_embedding and len(candidate.embedding) == dimension


def build_mission_text(mission: str, attributes: MissionAttributes) -> str:
    """Text submitted for the mission embedding."""
    return (
        f"{mission.strip()} Industry: {attributes.industry} "
        f"Location: {attributes.location} Role: {attributes.role}"
    )


def build_candidate_text(candidate: Candidate) -> str:
    """Text submitted for a candidate embedding (non-empty fields only)."""
    parts = [
        candidate.name,
        candidate.title,
        candidate.company,
        candidate.location,
        candidate.industry,
        candidate.summary,
        candidate.experience,
        candidate.education,
        ", ".join(s for s in candidate.skills if s and s.strip()),
    ]
    return " ".join(p.strip() for p in parts if p and p.strip())


@dataclass
class ResolveReport:
    """Outcome of one resolve() call."""

    candidates: List[Candidate] = field(default_factory=list)
    already_embedded: int = 0
    computed: int = 0
    failed: int = 0
    batches_total: int = 0
    batches_run: int = 0
    aborted: bool = False

    @property
    def with_embeddings(self) -> int:
        return sum(1 for c in self.candidates if c.has_embedding)


class EmbeddingResolver:
    """
    Computes and persists missing embedding vectors.

    Args:
        embeddings: LangChain embeddings client (aembed_query/aembed_documents)
        store: Candidate repository used to persist new vectors (optional)
        settings: Batching and failure tunables
        supports_batch: Provider accepts several inputs per request
    """

    def __init__(
        self,
        embeddings: Any,
        store: Optional[CandidateRepositoryInterface] = None,
        settings: Optional[MatchSettings] = None,
        supports_batch: bool = True,
        search_id: Optional[str] = None,
    ):
        if embeddings is None:
            raise ConfigurationError("Embedding provider is not configured")
        self._embeddings = embeddings
        self._store = store
        self.settings = settings or MatchSettings()
        self.supports_batch = supports_batch
        self.logger = get_logger(__name__, search_id=search_id, stage=STAGE)

    async def embed_mission(self, mission: str, attributes: MissionAttributes) -> List[float]:
        """
        Embed the mission text (always recomputed, never cached).

        Raises:
            EmbeddingProviderError: If the provider call fails or returns nothing
        """
        text = build_mission_text(mission, attributes)
        try:
            vector = await self._embeddings.aembed_query(text)
        except Exception as e:
            self.logger.error(f"✗ Mission embedding failed: {e}")
            raise EmbeddingProviderError("Failed to embed mission", details=str(e)) from e

        if not vector:
            raise EmbeddingProviderError("Embedding provider returned an empty mission vector")
        self.logger.debug(f"Mission embedded ({len(vector)} dimensions)")
        return list(vector)

    async def resolve(
        self,
        candidates: List[Candidate],
        expected_dimension: int,
        errors: Optional[ErrorCollector] = None,
    ) -> ResolveReport:
        """
        Fill in missing candidate vectors.

        Args:
            candidates: Prefiltered candidates (order is preserved)
            expected_dimension: Mission vector length; other lengths are discarded
            errors: Collector for recoverable per-batch failures

        Returns:
            ResolveReport whose ``candidates`` carry every vector obtained
        """
        errors = errors if errors is not None else ErrorCollector()
        report = ResolveReport()

        # Stored vectors from another embedding model are recomputed
        pending = [c for c in candidates if not _is_usable(c, expected_dimension)]
        report.already_embedded = len(candidates) - len(pending)
        stale = sum(1 for c in pending if c.has_embedding)
        if stale:
            self.logger.warning(
                f"{stale} stored vectors do not have {expected_dimension} dimensions; recomputing"
            )
        if not pending:
            report.candidates = list(candidates)
            self.logger.info(f"All {len(candidates)} candidates already embedded")
            return report

        batch_size = self.settings.embedding_batch_size
        group_size = self.settings.max_concurrent_batches
        batches = [pending[i:i + batch_size] for i in range(0, len(pending), batch_size)]
        report.batches_total = len(batches)
        self.logger.info(
            f"Embedding {len(pending)} candidates in {len(batches)} batches "
            f"({report.already_embedded} already embedded)"
        )

        resolved: Dict[str, List[float]] = {}
        consecutive_failures = 0
        for group_start in range(0, len(batches), group_size):
            if group_start > 0 and self.settings.group_pause_seconds > 0:
                await asyncio.sleep(self.settings.group_pause_seconds)

            group = batches[group_start:group_start + group_size]
            results = await asyncio.gather(
                *(self._embed_batch(batch, expected_dimension, errors) for batch in group)
            )

            for vectors in results:
                report.batches_run += 1
                resolved.update(vectors)
                if vectors:
                    consecutive_failures = 0
                else:
                    consecutive_failures += 1
                    if consecutive_failures >= self.settings.max_consecutive_batch_failures:
                        report.aborted = True

            if report.aborted:
                self.logger.warning(
                    f"✗ {self.settings.max_consecutive_batch_failures} consecutive batches failed; "
                    f"skipping {len(batches) - report.batches_run} remaining batches"
                )
                errors.add_error(
                    STAGE,
                    "resolve",
                    f"Stopped after {self.settings.max_consecutive_batch_failures} consecutive failed batches",
                    severity="high",
                )
                break

        report.candidates = [
            c if _is_usable(c, expected_dimension)
            else c.model_copy(update={"embedding": resolved.get(c.candidate_key)})
            for c in candidates
        ]
        report.computed = sum(1 for c in pending if c.candidate_key in resolved)
        report.failed = len(pending) - report.computed
        self.logger.info(
            f"✓ Resolved {report.computed}/{len(pending)} embeddings "
            f"({report.failed} failed, {report.batches_run}/{report.batches_total} batches run)"
        )
        return report

    async def _embed_batch(
        self,
        batch: List[Candidate],
        expected_dimension: int,
        errors: ErrorCollector,
    ) -> Dict[str, List[float]]:
        """Embed one batch and persist its vectors; never raises."""
        texts = [build_candidate_text(c) for c in batch]

        if self.supports_batch:
            try:
                raw = list(await self._embeddings.aembed_documents(texts))
            except Exception as e:
                self.logger.warning(f"Batch of {len(batch)} failed: {e}")
                errors.add_error(STAGE, "embed_batch", str(e), exception=e)
                return {}
            if len(raw) != len(batch):
                message = f"Provider returned {len(raw)} vectors for {len(batch)} inputs"
                self.logger.warning(message)
                errors.add_error(STAGE, "embed_batch", message)
                return {}
        else:
            results = await asyncio.gather(
                *(self._embeddings.aembed_query(text) for text in texts),
                return_exceptions=True,
            )
            raw = []
            for candidate, result in zip(batch, results):
                if isinstance(result, Exception):
                    self.logger.warning(f"Embedding failed for {candidate.name}: {result}")
                    errors.add_error(STAGE, "embed_query", str(result), exception=result)
                    raw.append(None)
                else:
                    raw.append(result)

        vectors: Dict[str, List[float]] = {}
        for candidate, vector in zip(batch, raw):
            if not vector:
                continue
            if len(vector) != expected_dimension:
                message = (
                    f"Discarded {len(vector)}-dimension vector for {candidate.name} "
                    f"(expected {expected_dimension})"
                )
                self.logger.warning(message)
                errors.add_error(STAGE, "dimension_check", message)
                continue
            vectors[candidate.candidate_key] = list(vector)

        if vectors:
            await self._persist(batch[0].user_id, vectors, errors)
        return vectors

    async def _persist(
        self,
        user_id: str,
        vectors: Dict[str, List[float]],
        errors: ErrorCollector,
    ) -> None:
        if self._store is None:
            return
        try:
            await asyncio.to_thread(self._store.persist_embeddings, user_id, vectors)
            self.logger.debug(f"Persisted {len(vectors)} embeddings")
        except Exception as e:
            # Ranking continues with the in-memory vectors
            self.logger.error(f"✗ Failed to persist {len(vectors)} embeddings: {e}")
            errors.add_error(STAGE, "persist_embeddings", str(e), severity="high", exception=e)
