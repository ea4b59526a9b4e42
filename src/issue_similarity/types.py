"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class IssueMetadata:
    """Categorical attributes used by the metadata booster."""

    issue_type_id: str | None = None
    labels: frozenset[str] = field(default_factory=frozenset)
    components: frozenset[str] = field(default_factory=frozenset)


@dataclass(slots=True, frozen=True)
class IssueDocument:
    """An issue report as scored by the engine."""

    doc_id: str
    summary_text: str = ""
    description_text: str = ""
    metadata: IssueMetadata | None = None


@dataclass(slots=True, frozen=True)
class FieldText:
    """One field of one document in the shape sent to a semantic provider."""

    doc_id: str
    text: str


@dataclass(slots=True, frozen=True)
class FieldScores:
    """Per-field similarity between the query and one candidate."""

    summary: float = 0.0
    description: float = 0.0


@dataclass(slots=True)
class SimilarityScore:
    """Score breakdown for a single candidate."""

    candidate_id: str
    lexical_score: float
    semantic_score: float
    merged_score: float
    boost: float
    final_score: float


@dataclass(slots=True)
class RankedIssue:
    doc_id: str
    summary_text: str
    description_text: str
    score: float


@dataclass(slots=True)
class RankedResult:
    """Ranked output returned to callers."""

    query: IssueDocument
    results: list[RankedIssue]
