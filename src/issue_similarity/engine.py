"""Request-scoped similarity pipeline: lexical + semantic -> merge -> boost -> rank."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from issue_similarity.config import EngineConfig, ScoringWeights
from issue_similarity.errors import InputError
from issue_similarity.lexical.tfidf import LexicalScorer
from issue_similarity.obs.tracing import CandidateTrace, Timer, TraceObserver, new_trace
from issue_similarity.scoring.booster import MetadataBooster
from issue_similarity.scoring.merger import ScoreMerger
from issue_similarity.scoring.ranker import Ranker, cap_score
from issue_similarity.semantic.adapter import SemanticAdapter
from issue_similarity.semantic.provider import SemanticScoreProvider
from issue_similarity.text.normalizer import TextNormalizer
from issue_similarity.types import IssueDocument, RankedResult, SimilarityScore

log = structlog.get_logger()


class SimilarityEngine:
    """Ranks candidate issues by similarity to a query issue.

    The engine holds only read-only collaborators; every call to `rank` builds
    its own document-frequency indices and semantic requests, so one instance
    can serve concurrent requests.

    Pipeline per request:
    1. Validate ids and bound the candidate pool.
    2. Start both semantic provider calls, then compute lexical field scores
       while they run.
    3. Aggregate each signal over summary/description with the field weights.
    4. Merge semantic and lexical scores through the threshold gate.
    5. Add the capped metadata boost and cap the total at 1.0.
    6. Round, stably sort and truncate.
    """

    def __init__(
        self,
        weights: ScoringWeights,
        provider: SemanticScoreProvider,
        *,
        config: EngineConfig | None = None,
        normalizer: TextNormalizer | None = None,
        observer: TraceObserver | None = None,
    ) -> None:
        self.weights = weights
        self.config = config or EngineConfig()
        self.lexical = LexicalScorer(normalizer)
        self.semantic = SemanticAdapter(
            provider, timeout_seconds=self.config.semantic_timeout_seconds
        )
        self.merger = ScoreMerger(weights)
        self.booster = MetadataBooster(weights)
        self.ranker = Ranker(self.config)
        self.observer = observer

    def rank(
        self,
        query: IssueDocument,
        candidates: Sequence[IssueDocument],
        *,
        top_n: int | None = None,
        apply_similarity_threshold: bool = False,
    ) -> RankedResult:
        """Score and rank candidates.

        With ``apply_similarity_threshold`` set, results scoring below the
        configured ``similarity-threshold`` are dropped after rounding. An observer
        that raises is logged and does not affect the returned result.
        """

        if top_n is not None and top_n < 1:
            raise InputError(f"top_n must be at least 1, got {top_n}")

        with Timer() as timer:
            pool, truncated = self._candidate_pool(query, candidates)
            scores, traces, available = self._score(query, pool)
            result = self.ranker.rank(
                query,
                pool,
                scores,
                top_n=top_n,
                min_score=self.weights.similarity_threshold if apply_similarity_threshold else None,
            )

        log.info(
            "similarity.ranked",
            query_id=query.doc_id,
            candidates=len(pool),
            returned=len(result.results),
            semantic_available=available,
            latency_ms=round(timer.elapsed_ms, 2),
        )
        if self.observer is not None:
            trace = new_trace(
                query_id=query.doc_id,
                candidate_count=len(pool),
                returned_count=len(result.results),
                semantic_available=available,
                truncated=truncated,
                latency_ms=timer.elapsed_ms,
                candidates=traces,
            )
            try:
                self.observer(trace)
            except Exception:
                log.exception(
                    "similarity.observer_failed",
                    query_id=query.doc_id,
                    trace_id=trace.trace_id,
                )
        return result

    def score_candidates(
        self,
        query: IssueDocument,
        candidates: Sequence[IssueDocument],
    ) -> list[SimilarityScore]:
        """Return unranked score breakdowns in candidate order."""
        pool, _ = self._candidate_pool(query, candidates)
        scores, _, _ = self._score(query, pool)
        return scores

    def _score(
        self,
        query: IssueDocument,
        candidates: list[IssueDocument],
    ) -> tuple[list[SimilarityScore], list[CandidateTrace], dict[str, bool]]:
        pending = self.semantic.start(query, candidates)
        try:
            lexical = self.lexical.field_scores(query, candidates)
        except BaseException:
            pending.cancel()
            raise
        semantic = pending.result()

        scores: list[SimilarityScore] = []
        traces: list[CandidateTrace] = []
        for candidate in candidates:
            lexical_score = self.merger.aggregate(lexical[candidate.doc_id])
            semantic_score = self.merger.aggregate(semantic.scores[candidate.doc_id])
            merged = self.merger.merge(semantic_score, lexical_score)
            breakdown = self.booster.breakdown(query.metadata, candidate.metadata)
            boost = self.booster.cap(breakdown)
            final = cap_score(merged + boost)

            score = SimilarityScore(
                candidate_id=candidate.doc_id,
                lexical_score=cap_score(lexical_score),
                semantic_score=cap_score(semantic_score),
                merged_score=cap_score(merged),
                boost=boost,
                final_score=final,
            )
            scores.append(score)
            traces.append(
                CandidateTrace(
                    candidate_id=score.candidate_id,
                    lexical_score=score.lexical_score,
                    semantic_score=score.semantic_score,
                    merged_score=score.merged_score,
                    boost=breakdown,
                    final_score=score.final_score,
                )
            )
        return scores, traces, semantic.available

    def _candidate_pool(
        self,
        query: IssueDocument,
        candidates: Sequence[IssueDocument],
    ) -> tuple[list[IssueDocument], bool]:
        if not query.doc_id:
            raise InputError("Query document has no id")

        seen: set[str] = set()
        for candidate in candidates:
            if not candidate.doc_id:
                raise InputError("Candidate document has no id")
            if candidate.doc_id == query.doc_id:
                raise InputError(f"Candidate {candidate.doc_id} is the query document")
            if candidate.doc_id in seen:
                raise InputError(f"Duplicate candidate id: {candidate.doc_id}")
            seen.add(candidate.doc_id)

        pool = list(candidates)
        limit = self.config.max_candidates
        if len(pool) <= limit:
            return pool, False
        log.warning(
            "similarity.candidates_truncated",
            query_id=query.doc_id,
            supplied=len(pool),
            kept=limit,
        )
        return pool[:limit], True
