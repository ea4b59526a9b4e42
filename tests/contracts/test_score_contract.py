import random

import pytest

from issue_similarity.config import DEFAULT_WEIGHTS, ScoringWeights
from issue_similarity.engine import SimilarityEngine
from issue_similarity.lexical.tfidf import cosine_similarity
from issue_similarity.types import FieldText, IssueDocument, IssueMetadata

_WORDS = "login mobile crash export csv button page slow timeout error user search".split()


class RandomProvider:
    def __init__(self, seed: int) -> None:
        self._rng = random.Random(seed)

    def score(self, query: FieldText, candidates: list[FieldText]) -> dict[str, float]:
        return {item.doc_id: self._rng.random() for item in candidates}


def _random_doc(rng: random.Random, doc_id: str) -> IssueDocument:
    return IssueDocument(
        doc_id=doc_id,
        summary_text=" ".join(rng.choices(_WORDS, k=rng.randint(0, 6))),
        description_text=" ".join(rng.choices(_WORDS, k=rng.randint(0, 12))),
        metadata=IssueMetadata(
            issue_type_id=rng.choice(["1", "2"]),
            labels=frozenset(rng.sample(_WORDS, 3)),
            components=frozenset(rng.sample(_WORDS, 2)),
        ),
    )


@pytest.mark.parametrize("seed", range(20))
def test_scores_stay_in_unit_interval_for_any_weights(seed: int) -> None:
    rng = random.Random(seed)
    weights = ScoringWeights.from_mapping({key: rng.random() for key in DEFAULT_WEIGHTS})
    query = _random_doc(rng, "Q")
    candidates = [_random_doc(rng, f"C-{i}") for i in range(12)]

    engine = SimilarityEngine(weights, RandomProvider(seed))
    scores = engine.score_candidates(query, candidates)
    result = engine.rank(query, candidates)

    for score in scores:
        for value in (
            score.lexical_score,
            score.semantic_score,
            score.merged_score,
            score.final_score,
        ):
            assert 0.0 <= value <= 1.0
        assert 0.0 <= score.boost <= weights.max_boost
    assert all(0.0 <= item.score <= 1.0 for item in result.results)
    assert len(result.results) <= 10


@pytest.mark.parametrize("seed", range(10))
def test_cosine_self_similarity_is_one(seed: int) -> None:
    rng = random.Random(seed)
    vector = {word: rng.uniform(0.001, 5.0) for word in rng.sample(_WORDS, rng.randint(1, 8))}

    assert cosine_similarity(vector, vector) == pytest.approx(1.0)
