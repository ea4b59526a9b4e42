"""Semantic score provider contract and concrete adapters."""

from __future__ import annotations

from typing import Any, Protocol

import httpx
import structlog

from issue_similarity.config import ProviderConfig
from issue_similarity.errors import CollaboratorFailure
from issue_similarity.semantic.embedder import Embedder, cosine
from issue_similarity.types import FieldText

log = structlog.get_logger()


class SemanticScoreProvider(Protocol):
    """Pairwise semantic scoring capability.

    Implementations return ``candidate id -> score``. They may raise; the
    `SemanticAdapter` converts any failure into an empty mapping.
    """

    def score(self, query: FieldText, candidates: list[FieldText]) -> dict[str, float]:
        """Score every candidate text against the query text."""


class HttpSemanticProvider:
    """Calls a remote similarity service over HTTP.

    Request body: ``{"current": {"key", "text"}, "others": [{"key", "text"}]}``.
    Response body: ``[{"key": ..., "score": ...}]``.
    """

    def __init__(self, config: ProviderConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self._client = client or httpx.Client(timeout=config.timeout_seconds)

    def score(self, query: FieldText, candidates: list[FieldText]) -> dict[str, float]:
        payload = {
            "current": {"key": query.doc_id, "text": query.text},
            "others": [{"key": item.doc_id, "text": item.text} for item in candidates],
        }
        try:
            response = self._client.post(
                self.config.url, json=payload, timeout=self.config.timeout_seconds
            )
        except httpx.HTTPError as exc:
            raise CollaboratorFailure(f"Semantic service unreachable: {exc}") from exc

        if not response.is_success:
            raise CollaboratorFailure(
                f"Semantic service returned {response.status_code}: {response.text[:200]}"
            )
        try:
            body: Any = response.json()
        except ValueError as exc:
            raise CollaboratorFailure("Semantic service returned invalid JSON") from exc
        if not isinstance(body, list):
            raise CollaboratorFailure("Semantic service response must be a list")

        scores: dict[str, float] = {}
        for item in body:
            if not isinstance(item, dict) or "key" not in item:
                continue
            try:
                scores[str(item["key"])] = float(item.get("score", 0.0))
            except (TypeError, ValueError):
                continue
        log.debug("semantic.response", url=self.config.url, scored=len(scores))
        return scores

    def close(self) -> None:
        self._client.close()


class EmbeddingSemanticProvider:
    """Scores pairs by cosine similarity of embeddings, floored at zero."""

    def __init__(self, embedder: Embedder) -> None:
        self.embedder = embedder

    def score(self, query: FieldText, candidates: list[FieldText]) -> dict[str, float]:
        if not candidates or not query.text.strip():
            return {}
        query_vector = self.embedder.embed_query(query.text)
        vectors = self.embedder.embed_documents([item.text for item in candidates])
        return {
            item.doc_id: max(0.0, cosine(query_vector, vector)) if item.text.strip() else 0.0
            for item, vector in zip(candidates, vectors, strict=True)
        }
