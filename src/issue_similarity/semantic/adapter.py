"""Boundary between issue documents and a semantic score provider."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from math import isfinite
from time import monotonic

import structlog

from issue_similarity.semantic.provider import SemanticScoreProvider
from issue_similarity.types import FieldScores, FieldText, IssueDocument

log = structlog.get_logger()

_FIELDS: dict[str, Callable[[IssueDocument], str]] = {
    "summary": lambda doc: doc.summary_text,
    "description": lambda doc: doc.description_text,
}


@dataclass(slots=True)
class SemanticFieldResult:
    """Semantic scores per candidate plus which fields the provider answered."""

    scores: dict[str, FieldScores] = field(default_factory=dict)
    available: dict[str, bool] = field(default_factory=dict)


class PendingSemanticScores:
    """Provider calls in flight for one request."""

    def __init__(
        self,
        candidates: Sequence[IssueDocument],
        futures: dict[str, Future[dict[str, float]]],
        pool: ThreadPoolExecutor | None,
        timeout_seconds: float,
    ) -> None:
        self._candidates = candidates
        self._futures = futures
        self._pool = pool
        self._deadline = monotonic() + timeout_seconds
        self._timeout_seconds = timeout_seconds

    def result(self) -> SemanticFieldResult:
        if not self._futures:
            return SemanticFieldResult(available={name: True for name in _FIELDS})
        try:
            raw = {name: self._await(name, future) for name, future in self._futures.items()}
        finally:
            self.cancel()

        result = SemanticFieldResult(
            available={name: raw.get(name) is not None for name in _FIELDS}
        )
        summary = raw.get("summary") or {}
        description = raw.get("description") or {}
        for doc in self._candidates:
            result.scores[doc.doc_id] = FieldScores(
                summary=_clamp(summary.get(doc.doc_id, 0.0)),
                description=_clamp(description.get(doc.doc_id, 0.0)),
            )
        return result

    def cancel(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=False, cancel_futures=True)
            self._pool = None

    def _await(self, field_name: str, future: Future[dict[str, float]]) -> dict[str, float] | None:
        try:
            scores = future.result(timeout=max(0.0, self._deadline - monotonic()))
        except FutureTimeoutError:
            future.cancel()
            log.warning("semantic.timeout", field=field_name, timeout_s=self._timeout_seconds)
            return None
        except Exception as exc:
            log.warning("semantic.request_failed", field=field_name, error=str(exc))
            return None
        if not isinstance(scores, dict):
            log.warning("semantic.bad_response", field=field_name, type=type(scores).__name__)
            return None
        return scores


class SemanticAdapter:
    """Issues one provider call per field, concurrently, each under a timeout.

    A field whose call fails, times out or returns something other than a
    mapping scores zero for every candidate. Nothing is retried and no
    failure reaches the caller.
    """

    def __init__(self, provider: SemanticScoreProvider, *, timeout_seconds: float = 5.0) -> None:
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    def start(
        self,
        query: IssueDocument,
        candidates: Sequence[IssueDocument],
    ) -> PendingSemanticScores:
        if not candidates:
            return PendingSemanticScores(candidates, {}, None, self.timeout_seconds)

        pool = ThreadPoolExecutor(max_workers=len(_FIELDS), thread_name_prefix="semantic")
        futures = {
            name: pool.submit(
                self.provider.score,
                FieldText(doc_id=query.doc_id, text=getter(query)),
                [FieldText(doc_id=doc.doc_id, text=getter(doc)) for doc in candidates],
            )
            for name, getter in _FIELDS.items()
        }
        return PendingSemanticScores(candidates, futures, pool, self.timeout_seconds)

    def field_scores(
        self,
        query: IssueDocument,
        candidates: Sequence[IssueDocument],
    ) -> SemanticFieldResult:
        return self.start(query, candidates).result()


def _clamp(value: object) -> float:
    try:
        score = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not isfinite(score):
        return 0.0
    return min(max(score, 0.0), 1.0)
