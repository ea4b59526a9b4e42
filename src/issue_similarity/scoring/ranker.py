"""Final capping, rounding, ordering and truncation."""

from __future__ import annotations

from collections.abc import Sequence

from issue_similarity.config import EngineConfig
from issue_similarity.errors import InputError
from issue_similarity.types import IssueDocument, RankedIssue, RankedResult, SimilarityScore


def cap_score(value: float) -> float:
    return min(max(value, 0.0), 1.0)


class Ranker:
    """Orders scored candidates into a `RankedResult`.

    Sorting is stable on the rounded score, so candidates with equal scores
    keep the order in which they were supplied.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()

    def rank(
        self,
        query: IssueDocument,
        candidates: Sequence[IssueDocument],
        scores: Sequence[SimilarityScore],
        *,
        top_n: int | None = None,
        min_score: float | None = None,
    ) -> RankedResult:
        limit = self.config.top_n if top_n is None else top_n
        if limit < 1:
            raise InputError(f"top_n must be at least 1, got {limit}")

        by_id = {candidate.doc_id: candidate for candidate in candidates}
        rounded = [
            (score.candidate_id, round(cap_score(score.final_score), self.config.score_precision))
            for score in scores
        ]
        if min_score is not None:
            rounded = [item for item in rounded if item[1] >= min_score]
        ordered = sorted(rounded, key=lambda item: item[1], reverse=True)

        results = []
        for doc_id, value in ordered[:limit]:
            doc = by_id[doc_id]
            results.append(
                RankedIssue(
                    doc_id=doc.doc_id,
                    summary_text=doc.summary_text,
                    description_text=doc.description_text,
                    score=value,
                )
            )
        return RankedResult(query=query, results=results)
