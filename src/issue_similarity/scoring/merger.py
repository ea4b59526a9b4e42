"""Blending of semantic and lexical evidence."""

from __future__ import annotations

from issue_similarity.config import ScoringWeights
from issue_similarity.types import FieldScores


class ScoreMerger:
    """Combines per-field scores and gates the semantic/lexical blend.

    Strong embedding agreement (at or above ``semantic_threshold``) is taken on
    its own. Below it, the semantic score is blended with the lexical score
    using the configured weights as-is, so the merged value may exceed 1.0
    until the final cap.
    """

    def __init__(self, weights: ScoringWeights) -> None:
        self.weights = weights

    def aggregate(self, scores: FieldScores) -> float:
        return (
            scores.summary * self.weights.summary_weight
            + scores.description * self.weights.description_weight
        )

    def merge(self, semantic_score: float, lexical_score: float) -> float:
        if semantic_score >= self.weights.semantic_threshold:
            return semantic_score
        return (
            semantic_score * self.weights.semantic_weight
            + lexical_score * self.weights.tfidf_weight
        )
