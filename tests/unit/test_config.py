import json

import pytest
from pydantic import ValidationError

from issue_similarity.config import DEFAULT_WEIGHTS, EngineConfig, ScoringWeights, load_weights
from issue_similarity.errors import ConfigurationError


def test_default_weights_load() -> None:
    weights = load_weights()

    assert weights.summary_weight == 0.8
    assert weights.description_weight == 0.2
    assert weights.semantic_threshold == 0.6
    assert weights.to_mapping() == DEFAULT_WEIGHTS


def test_missing_weight_is_rejected() -> None:
    mapping = dict(DEFAULT_WEIGHTS)
    del mapping["max_boost"]

    with pytest.raises(ConfigurationError, match="max_boost"):
        ScoringWeights.from_mapping(mapping)


@pytest.mark.parametrize("value", [-0.1, 1.5, "heavy"])
def test_out_of_range_weight_is_rejected(value: object) -> None:
    with pytest.raises(ConfigurationError):
        ScoringWeights.from_mapping({**DEFAULT_WEIGHTS, "semantic_weight": value})


def test_unknown_option_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        ScoringWeights.from_mapping({**DEFAULT_WEIGHTS, "summary_weightage": 0.5})


def test_weights_are_immutable() -> None:
    weights = load_weights()

    with pytest.raises(ValidationError):
        weights.max_boost = 0.9  # type: ignore[misc]


def test_load_weights_from_file(tmp_path) -> None:
    path = tmp_path / "weights.json"
    path.write_text(json.dumps({**DEFAULT_WEIGHTS, "tf_idf_weight": 0.5}), encoding="utf-8")

    assert load_weights(path).tfidf_weight == 0.5


def test_load_weights_rejects_bad_files(tmp_path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_weights(broken)
    with pytest.raises(ConfigurationError):
        load_weights(listing)
    with pytest.raises(ConfigurationError):
        load_weights(tmp_path / "absent.json")


def test_engine_config_bounds() -> None:
    assert EngineConfig().top_n == 10
    with pytest.raises(ValidationError):
        EngineConfig(top_n=0)
    with pytest.raises(ValidationError):
        EngineConfig(semantic_timeout_seconds=0)
