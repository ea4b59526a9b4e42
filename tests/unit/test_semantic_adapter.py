import json
import threading

import httpx
import pytest
from langchain_core.embeddings import Embeddings

from issue_similarity.config import ProviderConfig
from issue_similarity.errors import CollaboratorFailure
from issue_similarity.semantic.adapter import SemanticAdapter
from issue_similarity.semantic.embedder import HashingEmbedder, LangChainEmbedder, cosine
from issue_similarity.semantic.provider import EmbeddingSemanticProvider, HttpSemanticProvider
from issue_similarity.types import FieldText, IssueDocument

QUERY = IssueDocument(doc_id="Q-1", summary_text="query summary", description_text="query body")
CANDIDATES = [
    IssueDocument(doc_id="C-1", summary_text="first", description_text="first body"),
    IssueDocument(doc_id="C-2", summary_text="second", description_text="second body"),
]


class TextKeyedProvider:
    """Returns canned scores chosen by the query text of each call."""

    def __init__(self, responses: dict[str, object]) -> None:
        self.responses = responses
        self.calls: list[tuple[FieldText, list[FieldText]]] = []

    def score(self, query: FieldText, candidates: list[FieldText]) -> dict[str, float]:
        self.calls.append((query, candidates))
        response = self.responses.get(query.text, {})
        if isinstance(response, Exception):
            raise response
        return response  # type: ignore[return-value]


def test_scores_mapped_per_field_with_missing_ids_as_zero() -> None:
    provider = TextKeyedProvider(
        {"query summary": {"C-1": 0.7}, "query body": {"C-1": 0.2, "C-2": 0.4, "C-9": 1.0}}
    )

    result = SemanticAdapter(provider).field_scores(QUERY, CANDIDATES)

    assert result.scores["C-1"].summary == 0.7
    assert result.scores["C-1"].description == 0.2
    assert result.scores["C-2"].summary == 0.0
    assert result.scores["C-2"].description == 0.4
    assert set(result.scores) == {"C-1", "C-2"}
    assert result.available == {"summary": True, "description": True}

    sent = {query.text: [item.doc_id for item in items] for query, items in provider.calls}
    assert sent == {"query summary": ["C-1", "C-2"], "query body": ["C-1", "C-2"]}


def test_out_of_range_scores_are_clamped() -> None:
    provider = TextKeyedProvider(
        {"query summary": {"C-1": 1.7, "C-2": -0.3}, "query body": {"C-1": float("nan"), "C-2": "x"}}
    )

    result = SemanticAdapter(provider).field_scores(QUERY, CANDIDATES)

    assert result.scores["C-1"].summary == 1.0
    assert result.scores["C-2"].summary == 0.0
    assert result.scores["C-1"].description == 0.0
    assert result.scores["C-2"].description == 0.0


def test_provider_failure_degrades_field_to_zero() -> None:
    provider = TextKeyedProvider(
        {"query summary": {"C-1": 0.8}, "query body": RuntimeError("service down")}
    )

    result = SemanticAdapter(provider).field_scores(QUERY, CANDIDATES)

    assert result.scores["C-1"].summary == 0.8
    assert result.scores["C-1"].description == 0.0
    assert result.available == {"summary": True, "description": False}


def test_provider_timeout_degrades_field_to_zero() -> None:
    release = threading.Event()

    class SlowDescriptions:
        def score(self, query: FieldText, candidates: list[FieldText]) -> dict[str, float]:
            if query.text == "query body":
                release.wait(timeout=5)
            return {item.doc_id: 0.5 for item in candidates}

    try:
        result = SemanticAdapter(SlowDescriptions(), timeout_seconds=0.05).field_scores(
            QUERY, CANDIDATES
        )
    finally:
        release.set()

    assert result.scores["C-1"].summary == 0.5
    assert result.scores["C-1"].description == 0.0
    assert result.available == {"summary": True, "description": False}


def test_field_calls_run_concurrently() -> None:
    barrier = threading.Barrier(2, timeout=2)

    class Rendezvous:
        def score(self, query: FieldText, candidates: list[FieldText]) -> dict[str, float]:
            barrier.wait()
            return {item.doc_id: 0.3 for item in candidates}

    result = SemanticAdapter(Rendezvous(), timeout_seconds=5).field_scores(QUERY, CANDIDATES)

    assert result.available == {"summary": True, "description": True}
    assert result.scores["C-2"].description == 0.3


def test_no_candidates_skips_provider() -> None:
    provider = TextKeyedProvider({})

    result = SemanticAdapter(provider).field_scores(QUERY, [])

    assert provider.calls == []
    assert result.scores == {}


def _http_provider(handler) -> HttpSemanticProvider:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpSemanticProvider(ProviderConfig(url="http://semantic.test/similarity"), client=client)


def test_http_provider_request_and_response_shape() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[{"key": "C-1", "score": 0.82}, {"key": "C-2"}, "junk"])

    provider = _http_provider(handler)
    scores = provider.score(
        FieldText(doc_id="Q-1", text="query"), [FieldText("C-1", "one"), FieldText("C-2", "two")]
    )

    assert seen["body"] == {
        "current": {"key": "Q-1", "text": "query"},
        "others": [{"key": "C-1", "text": "one"}, {"key": "C-2", "text": "two"}],
    }
    assert scores == {"C-1": 0.82, "C-2": 0.0}


@pytest.mark.parametrize(
    "status, kwargs",
    [
        (503, {"text": "unavailable"}),
        (200, {"text": "not json"}),
        (200, {"json": {"C-1": 0.5}}),
    ],
)
def test_http_provider_raises_collaborator_failure(status: int, kwargs: dict) -> None:
    provider = _http_provider(lambda request: httpx.Response(status, **kwargs))

    with pytest.raises(CollaboratorFailure):
        provider.score(FieldText("Q-1", "query"), [FieldText("C-1", "one")])

    result = SemanticAdapter(provider).field_scores(QUERY, CANDIDATES)
    assert result.scores["C-1"].summary == 0.0
    assert result.available == {"summary": False, "description": False}


def test_http_provider_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(CollaboratorFailure):
        _http_provider(handler).score(FieldText("Q-1", "query"), [FieldText("C-1", "one")])


def test_embedding_provider_scores() -> None:
    provider = EmbeddingSemanticProvider(HashingEmbedder())

    scores = provider.score(
        FieldText("Q-1", "login fails on mobile"),
        [FieldText("C-1", "login fails on mobile"), FieldText("C-2", "")],
    )

    assert scores["C-1"] == pytest.approx(1.0)
    assert scores["C-2"] == 0.0
    assert provider.score(FieldText("Q-1", "  "), [FieldText("C-1", "x")]) == {}


class _LengthEmbeddings(Embeddings):
    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self.embed_query(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return [float(len(text)), 1.0]


def test_langchain_embedder_wraps_embeddings() -> None:
    embedder = LangChainEmbedder(_LengthEmbeddings())

    assert embedder.embed_query("hello") == [5.0, 1.0]
    assert embedder.embed_documents(["a", "b"])[0] == embedder.embed_query("a")

    with pytest.raises(TypeError):
        LangChainEmbedder(object())


def test_hashing_embedder_relates_inflected_words() -> None:
    embedder = HashingEmbedder()

    crash, crashes, export = embedder.embed_documents(["crash", "crashes", "export"])

    assert cosine(crash, crash) == pytest.approx(1.0)
    assert cosine(crash, crashes) > cosine(crash, export)
    assert cosine(crash, crashes) > 0.2
    assert embedder.embed_query("  ") == [0.0] * embedder.dimension
