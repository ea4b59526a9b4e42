"""FastAPI entrypoint for similarity ranking and trace endpoints."""

from __future__ import annotations

import os
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from issue_similarity.config import EngineConfig, ProviderConfig, load_weights
from issue_similarity.engine import SimilarityEngine
from issue_similarity.errors import InputError
from issue_similarity.ingest.parser import issue_from_tracker_payload
from issue_similarity.obs.logging import configure_logging
from issue_similarity.obs.tracing import TraceStore
from issue_similarity.semantic.embedder import HashingEmbedder, LangChainEmbedder
from issue_similarity.semantic.provider import (
    EmbeddingSemanticProvider,
    HttpSemanticProvider,
    SemanticScoreProvider,
)
from issue_similarity.types import IssueDocument, IssueMetadata, RankedResult


def _create_provider() -> tuple[SemanticScoreProvider, str]:
    url = os.getenv("SEMANTIC_API_URL")
    if url:
        config = ProviderConfig(
            url=url, timeout_seconds=float(os.getenv("SEMANTIC_API_TIMEOUT", "5.0"))
        )
        return HttpSemanticProvider(config), "http"

    if os.getenv("OPENAI_API_KEY"):
        from langchain_openai import OpenAIEmbeddings

        embeddings = OpenAIEmbeddings(
            model=os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")
        )
        return EmbeddingSemanticProvider(LangChainEmbedder(embeddings)), "openai"

    return EmbeddingSemanticProvider(HashingEmbedder()), "hashing"


class MetadataIn(BaseModel):
    issue_type_id: str | None = None
    labels: list[str] = Field(default_factory=list)
    components: list[str] = Field(default_factory=list)


class DocumentIn(BaseModel):
    id: str = Field(min_length=1)
    summary: str = ""
    description: str = ""
    metadata: MetadataIn | None = None

    def to_document(self) -> IssueDocument:
        metadata = None
        if self.metadata is not None:
            metadata = IssueMetadata(
                issue_type_id=self.metadata.issue_type_id,
                labels=frozenset(self.metadata.labels),
                components=frozenset(self.metadata.components),
            )
        return IssueDocument(
            doc_id=self.id,
            summary_text=self.summary,
            description_text=self.description,
            metadata=metadata,
        )


class SimilarRequest(BaseModel):
    query: DocumentIn
    candidates: list[DocumentIn] = Field(default_factory=list)
    top_n: int | None = Field(default=None, ge=1, le=100)
    apply_similarity_threshold: bool = False


class TrackerIssuesRequest(BaseModel):
    issue: dict[str, Any]
    others: list[dict[str, Any]] = Field(default_factory=list)
    top_n: int | None = Field(default=None, ge=1, le=100)
    apply_similarity_threshold: bool = False


configure_logging(os.getenv("LOG_LEVEL", "INFO"), json_output=os.getenv("LOG_JSON") == "1")

app = FastAPI(title="Issue Similarity", version="0.1.0")

_weights = load_weights(os.getenv("ISSUE_SIMILARITY_WEIGHTS"))
_provider, _provider_mode = _create_provider()
_trace_store = TraceStore()
_engine = SimilarityEngine(
    _weights,
    _provider,
    config=EngineConfig(),
    observer=_trace_store.record,
)


def _serialize(result: RankedResult) -> dict[str, Any]:
    return {
        "query": {
            "id": result.query.doc_id,
            "summary_text": result.query.summary_text,
            "description_text": result.query.description_text,
        },
        "results": [
            {
                "id": item.doc_id,
                "summary_text": item.summary_text,
                "description_text": item.description_text,
                "score": item.score,
            }
            for item in result.results
        ],
    }


def _rank(
    query: IssueDocument,
    candidates: list[IssueDocument],
    *,
    top_n: int | None,
    apply_similarity_threshold: bool,
) -> dict[str, Any]:
    try:
        result = _engine.rank(
            query,
            candidates,
            top_n=top_n,
            apply_similarity_threshold=apply_similarity_threshold,
        )
    except InputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _serialize(result)


@app.get("/health")
def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "provider_mode": _provider_mode,
        "trace_count": len(_trace_store.list_recent(limit=1000)),
    }


@app.post("/similar")
def similar(request: SimilarRequest) -> dict[str, Any]:
    return _rank(
        request.query.to_document(),
        [candidate.to_document() for candidate in request.candidates],
        top_n=request.top_n,
        apply_similarity_threshold=request.apply_similarity_threshold,
    )


@app.post("/similar/issues")
def similar_issues(request: TrackerIssuesRequest) -> dict[str, Any]:
    try:
        query = issue_from_tracker_payload(request.issue)
        candidates = [issue_from_tracker_payload(other) for other in request.others]
    except InputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _rank(
        query,
        candidates,
        top_n=request.top_n,
        apply_similarity_threshold=request.apply_similarity_threshold,
    )


@app.get("/traces")
def traces(limit: int = 20) -> dict[str, Any]:
    records = [asdict(record) for record in _trace_store.list_recent(limit=limit)]
    return {"items": records}


@app.get("/traces/{trace_id}")
def trace_detail(trace_id: str) -> dict[str, Any]:
    try:
        record = _trace_store.get(trace_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return asdict(record)


@app.get("/metrics")
def metrics() -> dict[str, Any]:
    return _trace_store.summary()
