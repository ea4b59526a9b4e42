"""Issue similarity scoring engine."""

from .config import EngineConfig, ScoringWeights, load_weights
from .engine import SimilarityEngine
from .errors import CollaboratorFailure, ConfigurationError, InputError, SimilarityError
from .types import IssueDocument, IssueMetadata, RankedIssue, RankedResult, SimilarityScore

__all__ = [
    "CollaboratorFailure",
    "ConfigurationError",
    "EngineConfig",
    "InputError",
    "IssueDocument",
    "IssueMetadata",
    "RankedIssue",
    "RankedResult",
    "ScoringWeights",
    "SimilarityEngine",
    "SimilarityError",
    "SimilarityScore",
    "load_weights",
]
