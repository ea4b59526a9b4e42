"""Capped additive boosts from categorical metadata overlap."""

from __future__ import annotations

from dataclasses import dataclass

from issue_similarity.config import ScoringWeights
from issue_similarity.types import IssueMetadata


@dataclass(slots=True, frozen=True)
class BoostBreakdown:
    issue_type: float = 0.0
    labels: float = 0.0
    components: float = 0.0
    shared_labels: tuple[str, ...] = ()
    shared_components: tuple[str, ...] = ()

    @property
    def accumulated(self) -> float:
        return self.issue_type + self.labels + self.components


class MetadataBooster:
    def __init__(self, weights: ScoringWeights) -> None:
        self.weights = weights

    def breakdown(
        self, query: IssueMetadata | None, candidate: IssueMetadata | None
    ) -> BoostBreakdown:
        if query is None or candidate is None:
            return BoostBreakdown()

        same_type = (
            query.issue_type_id is not None
            and query.issue_type_id == candidate.issue_type_id
        )
        shared_labels = tuple(sorted(query.labels & candidate.labels))
        shared_components = tuple(sorted(query.components & candidate.components))
        return BoostBreakdown(
            issue_type=self.weights.issuetype_boost if same_type else 0.0,
            labels=self.weights.label_boost * len(shared_labels),
            components=self.weights.component_boost * len(shared_components),
            shared_labels=shared_labels,
            shared_components=shared_components,
        )

    def boost(self, query: IssueMetadata | None, candidate: IssueMetadata | None) -> float:
        return self.cap(self.breakdown(query, candidate))

    def cap(self, breakdown: BoostBreakdown) -> float:
        return min(breakdown.accumulated, self.weights.max_boost)
