"""Error taxonomy for the scoring engine."""

from __future__ import annotations


class SimilarityError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(SimilarityError):
    """A weight is missing or outside its allowed range."""


class InputError(SimilarityError):
    """A document cannot be scored as supplied."""


class CollaboratorFailure(SimilarityError):
    """An external collaborator returned a non-success result.

    Raised inside provider adapters only; the semantic adapter converts it
    into an empty score mapping.
    """
