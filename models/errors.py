"""Error taxonomy shared by the matching core and its collaborators."""

from __future__ import annotations


class LostFoundError(Exception):
    """Base class for errors raised by the lost & found matcher."""


class CollaboratorFailure(LostFoundError):
    """An external capability (vision, normalizer, comparer, explainer) failed."""

    collaborator = "collaborator"

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class FeatureExtractionError(CollaboratorFailure):
    collaborator = "feature_extractor"


class NormalizationError(CollaboratorFailure):
    collaborator = "text_normalizer"


class SemanticComparisonError(CollaboratorFailure):
    collaborator = "semantic_comparer"


class ExplanationError(CollaboratorFailure):
    collaborator = "match_explainer"


class ValidationFailure(LostFoundError, ValueError):
    """Malformed item input or an illegal state transition."""


class ConfigurationFailure(LostFoundError, ValueError):
    """Non-numeric or non-finite weight/threshold configuration."""


__all__ = [
    "LostFoundError",
    "CollaboratorFailure",
    "FeatureExtractionError",
    "NormalizationError",
    "SemanticComparisonError",
    "ExplanationError",
    "ValidationFailure",
    "ConfigurationFailure",
]
