"""TF-IDF vectors, document frequencies and cosine similarity."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from math import log, sqrt

from issue_similarity.text.normalizer import TextNormalizer
from issue_similarity.types import FieldScores, IssueDocument


@dataclass(slots=True)
class DocumentFrequencyIndex:
    """Token -> number of corpus documents containing it at least once."""

    counts: dict[str, int] = field(default_factory=dict)
    total_docs: int = 0

    def df(self, token: str) -> int:
        return max(self.counts.get(token, 1), 1)


def build_document_frequencies(token_sequences: Iterable[Sequence[str]]) -> DocumentFrequencyIndex:
    index = DocumentFrequencyIndex()
    for tokens in token_sequences:
        index.total_docs += 1
        for token in set(tokens):
            index.counts[token] = index.counts.get(token, 0) + 1
    return index


def compute_tfidf(
    tokens: Sequence[str],
    df: DocumentFrequencyIndex,
    total_docs: int | None = None,
) -> dict[str, float]:
    """Weight each distinct token by tf * ln(total_docs / df).

    Tokens missing from ``df`` are treated as occurring in exactly one document.
    """

    if not tokens:
        return {}
    n_docs = max(df.total_docs if total_docs is None else total_docs, 1)
    length = len(tokens)
    return {
        token: (count / length) * log(n_docs / df.df(token))
        for token, count in Counter(tokens).items()
    }


def cosine_similarity(a: dict[str, float], b: dict[str, float]) -> float:
    if not a or not b:
        return 0.0
    if len(b) < len(a):
        a, b = b, a
    dot = sum(weight * b.get(token, 0.0) for token, weight in a.items())
    norm_a = sqrt(sum(weight * weight for weight in a.values()))
    norm_b = sqrt(sum(weight * weight for weight in b.values()))
    denominator = norm_a * norm_b
    if denominator == 0:
        return 0.0
    return min(max(dot / denominator, 0.0), 1.0)


class LexicalScorer:
    """Scores candidates against a query with per-field TF-IDF indices.

    Summary and description each get their own document-frequency index built
    over that field's corpus. The query document is part of both corpora.
    """

    def __init__(self, normalizer: TextNormalizer | None = None) -> None:
        self.normalizer = normalizer or TextNormalizer()

    def field_scores(
        self,
        query: IssueDocument,
        candidates: Sequence[IssueDocument],
    ) -> dict[str, FieldScores]:
        summaries = self._field_similarity(
            query.summary_text, [c.summary_text for c in candidates]
        )
        descriptions = self._field_similarity(
            query.description_text, [c.description_text for c in candidates]
        )
        return {
            candidate.doc_id: FieldScores(summary=summary, description=description)
            for candidate, summary, description in zip(
                candidates, summaries, descriptions, strict=True
            )
        }

    def _field_similarity(self, query_text: str, candidate_texts: list[str]) -> list[float]:
        query_tokens = self.normalizer.normalize(query_text)
        candidate_tokens = [self.normalizer.normalize(text) for text in candidate_texts]
        index = build_document_frequencies([query_tokens, *candidate_tokens])

        query_vector = compute_tfidf(query_tokens, index)
        return [
            cosine_similarity(query_vector, compute_tfidf(tokens, index))
            for tokens in candidate_tokens
        ]
