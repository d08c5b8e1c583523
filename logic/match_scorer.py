"""Weighted confidence scoring for one lost/found pair."""

from __future__ import annotations

from lostfound_app.config import MatchingConfig
from models.item import ProcessedItem
from models.match import MatchScore, SimilarityBreakdown, clamp01
from logic.similarity import image_similarity, metadata_similarity, text_similarity
from tools.match_explainer import MatchExplainer
from tools.semantic_comparer import SemanticComparer


class MatchScorer:
    """Combine image, text and metadata similarity into one confidence score.

    The explainer is only consulted for pairs at or above the threshold.
    """

    def __init__(
        self,
        comparer: SemanticComparer,
        explainer: MatchExplainer,
        config: MatchingConfig | None = None,
    ) -> None:
        self.comparer = comparer
        self.explainer = explainer
        self.config = config or MatchingConfig()

    def breakdown(self, lost: ProcessedItem, found: ProcessedItem) -> SimilarityBreakdown:
        return SimilarityBreakdown(
            image_similarity=image_similarity(lost.image_features, found.image_features),
            text_similarity=text_similarity(self.comparer, lost.item.description, found.item.description),
            metadata_similarity=metadata_similarity(lost.normalized, found.normalized),
        )

    def confidence(self, breakdown: SimilarityBreakdown) -> float:
        return clamp01(
            breakdown.image_similarity * self.config.image_weight
            + breakdown.text_similarity * self.config.text_weight
            + breakdown.metadata_similarity * self.config.metadata_weight
        )

    def score(self, lost: ProcessedItem, found: ProcessedItem) -> MatchScore:
        """Score a pair; ``lost`` and ``found`` are oriented by the items' declared types."""

        breakdown = self.breakdown(lost, found)
        confidence_score = self.confidence(breakdown)
        passed = confidence_score >= self.config.confidence_threshold

        explanation = ""
        if passed:
            explanation = self.explainer.explain_or_fallback(lost.item, found.item, breakdown)

        return MatchScore(
            confidence_score=confidence_score,
            explanation=explanation,
            breakdown=breakdown,
            passed=passed,
        )


__all__ = ["MatchScorer"]
