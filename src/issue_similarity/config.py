"""Configuration models for the similarity engine."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from issue_similarity.errors import ConfigurationError

DEFAULT_WEIGHTS: dict[str, float] = {
    "summary-weightage": 0.8,
    "description-weightage": 0.2,
    "similarity-threshold": 0.5,
    "semantic_weight": 0.8,
    "tf_idf_weight": 0.2,
    "semantic_threshold": 0.6,
    "max_boost": 0.15,
    "boost_issuetype_match": 0.05,
    "boost_labels_overlap": 0.03,
    "boost_components_overlap": 0.04,
}


class ScoringWeights(BaseModel):
    """Tunable scoring parameters, keyed by their external option names.

    Every option is required. Values are kept exactly as configured: the
    semantic and TF-IDF weights are never renormalized.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    summary_weight: float = Field(alias="summary-weightage", ge=0.0, le=1.0)
    description_weight: float = Field(alias="description-weightage", ge=0.0, le=1.0)
    similarity_threshold: float = Field(alias="similarity-threshold", ge=0.0, le=1.0)
    semantic_weight: float = Field(alias="semantic_weight", ge=0.0, le=1.0)
    tfidf_weight: float = Field(alias="tf_idf_weight", ge=0.0, le=1.0)
    semantic_threshold: float = Field(alias="semantic_threshold", ge=0.0, le=1.0)
    max_boost: float = Field(alias="max_boost", ge=0.0, le=1.0)
    issuetype_boost: float = Field(alias="boost_issuetype_match", ge=0.0, le=1.0)
    label_boost: float = Field(alias="boost_labels_overlap", ge=0.0, le=1.0)
    component_boost: float = Field(alias="boost_components_overlap", ge=0.0, le=1.0)

    @classmethod
    def from_mapping(cls, mapping: dict[str, Any]) -> "ScoringWeights":
        try:
            return cls.model_validate(mapping)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid scoring weights: {exc}") from exc

    def to_mapping(self) -> dict[str, float]:
        return self.model_dump(by_alias=True)


class EngineConfig(BaseModel):
    """Configures request-level limits of the engine."""

    model_config = ConfigDict(frozen=True)

    top_n: int = Field(default=10, ge=1)
    semantic_timeout_seconds: float = Field(default=5.0, gt=0.0)
    max_candidates: int = Field(default=5000, ge=1)
    score_precision: int = Field(default=2, ge=0, le=6)


class ProviderConfig(BaseModel):
    """Configures the HTTP semantic scoring provider."""

    url: str = Field(min_length=1)
    timeout_seconds: float = Field(default=5.0, gt=0.0)


def load_weights(path: str | Path | None = None) -> ScoringWeights:
    """Load weights from a JSON file, or the shipped defaults when no path is given."""

    if path is None:
        return ScoringWeights.from_mapping(DEFAULT_WEIGHTS)

    file_path = Path(path)
    try:
        payload = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read weights from {file_path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Weights file must contain a JSON object: {file_path}")
    return ScoringWeights.from_mapping(payload)
