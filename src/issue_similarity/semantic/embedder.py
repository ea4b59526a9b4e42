"""Embedders backing the embedding-based semantic score provider."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from hashlib import blake2b
from math import sqrt
from typing import Any, cast

_WORD_SPLIT = re.compile(r"[^a-z0-9_]+")


class Embedder(ABC):
    """Embedder interface used by the embedding-backed semantic provider."""

    @abstractmethod
    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per candidate text, in input order."""

    @abstractmethod
    def embed_query(self, text: str) -> list[float]:
        """Return the vector for the query text."""


class HashingEmbedder(Embedder):
    """Offline stand-in for an embedding service.

    Each word and each of its padded character trigrams is hashed into a fixed
    number of signed buckets, so "crash" and "crashes" land close together
    without a model. The API falls back to this when neither
    ``SEMANTIC_API_URL`` nor ``OPENAI_API_KEY`` is configured.
    """

    def __init__(self, dimension: int = 512, trigram_weight: float = 0.5) -> None:
        self.dimension = dimension
        self.trigram_weight = trigram_weight

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._embed(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._embed(text)

    def _embed(self, text: str) -> list[float]:
        vector = [0.0] * self.dimension
        for word in _WORD_SPLIT.split(text.lower()):
            if not word:
                continue
            self._add(vector, word, 1.0)
            padded = f"#{word}#"
            for start in range(len(padded) - 2):
                self._add(vector, padded[start : start + 3], self.trigram_weight)

        norm = sqrt(sum(value * value for value in vector))
        if norm == 0:
            return vector
        return [value / norm for value in vector]

    def _add(self, vector: list[float], feature: str, weight: float) -> None:
        digest = blake2b(feature.encode("utf-8"), digest_size=8).digest()
        bucket = int.from_bytes(digest[:4], "little") % self.dimension
        vector[bucket] += -weight if digest[4] & 1 else weight


class LangChainEmbedder(Embedder):
    """Adapts any LangChain `Embeddings` implementation (e.g. OpenAIEmbeddings)."""

    def __init__(self, embeddings: Any) -> None:
        from langchain_core.embeddings import Embeddings

        if not isinstance(embeddings, Embeddings):
            raise TypeError("embeddings must implement langchain_core.embeddings.Embeddings")
        self._embeddings = embeddings

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return cast(list[list[float]], self._embeddings.embed_documents(texts))

    def embed_query(self, text: str) -> list[float]:
        return cast(list[float], self._embeddings.embed_query(text))


def cosine(a: list[float], b: list[float]) -> float:
    if not a or not b or len(a) != len(b):
        return 0.0
    numerator = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = sqrt(sum(x * x for x in a))
    norm_b = sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return numerator / (norm_a * norm_b)
