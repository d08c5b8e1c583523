"""Explanation generator capability for matches that pass the threshold."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from lostfound_app.logging_config import get_logger, log_event
from models.errors import ExplanationError
from models.item import Item
from models.match import SimilarityBreakdown
from tools.gemini_client import GeminiClient, strip_wrapping_quotes
from tools.observability import instrument_collaborator


LOGGER = get_logger(__name__)

FALLBACK_EXPLANATION = "These items may match based on their visual and textual similarities."


class MatchExplainer(ABC):
    """Abstract explanation interface."""

    @abstractmethod
    def explain_match(self, lost_item: Item, found_item: Item, breakdown: SimilarityBreakdown) -> str:
        """Return a short rationale for why the two items may match."""

    def explain_or_fallback(self, lost_item: Item, found_item: Item, breakdown: SimilarityBreakdown) -> str:
        """Explain, degrading to :data:`FALLBACK_EXPLANATION`; never raises."""

        try:
            explanation = self.explain_match(lost_item, found_item, breakdown)
        except Exception as exc:  # noqa: BLE001
            log_event(
                LOGGER,
                logging.WARNING,
                "explanation_fallback",
                explainer=type(self).__name__,
                error=type(exc).__name__,
            )
            return FALLBACK_EXPLANATION
        if not isinstance(explanation, str) or not explanation.strip():
            return FALLBACK_EXPLANATION
        return explanation.strip()


def _pct(value: float) -> str:
    return f"{value * 100:.1f}%"


class GeminiMatchExplainer(MatchExplainer):
    """Gemini-backed explainer producing a friendly two or three sentence rationale."""

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    @staticmethod
    def _prompt(lost_item: Item, found_item: Item, breakdown: SimilarityBreakdown) -> str:
        return (
            "You are analyzing a potential match between a lost item and a found item "
            "for a campus lost & found system.\n\n"
            f"Lost Item: {lost_item.title}\n"
            f"Description: {lost_item.description}\n\n"
            f"Found Item: {found_item.title}\n"
            f"Description: {found_item.description}\n\n"
            "Matching Scores:\n"
            f"- Visual Similarity: {_pct(breakdown.image_similarity)}\n"
            f"- Description Similarity: {_pct(breakdown.text_similarity)}\n"
            f"- Category Match: {_pct(breakdown.metadata_similarity)}\n\n"
            "Generate a brief, friendly explanation (2-3 sentences) for why these items might match.\n"
            "Focus on the most compelling matching features.\n"
            "Speak to a student.\n\n"
            "Response format:\n"
            '"[Explanation text]"'
        )

    @instrument_collaborator("match_explainer")
    def explain_match(self, lost_item: Item, found_item: Item, breakdown: SimilarityBreakdown) -> str:
        try:
            reply = self.client.generate(self._prompt(lost_item, found_item, breakdown))
        except Exception as exc:  # noqa: BLE001
            raise ExplanationError(f"Gemini explanation failed: {exc}", cause=exc) from exc
        return strip_wrapping_quotes(reply)


class TemplateMatchExplainer(MatchExplainer):
    """Offline explainer naming the strongest similarity signal."""

    _SIGNALS = {
        "image_similarity": "they look alike in the photos",
        "text_similarity": "their descriptions line up",
        "metadata_similarity": "they share a category and identifying features",
    }

    @instrument_collaborator("match_explainer")
    def explain_match(self, lost_item: Item, found_item: Item, breakdown: SimilarityBreakdown) -> str:
        scores = breakdown.as_dict()
        strongest = max(scores, key=lambda key: scores[key])
        return (
            f"The found item \"{found_item.title}\" may be your \"{lost_item.title}\": "
            f"{self._SIGNALS[strongest]} ({_pct(scores[strongest])}). "
            f"Visual {_pct(breakdown.image_similarity)}, description {_pct(breakdown.text_similarity)}, "
            f"category and features {_pct(breakdown.metadata_similarity)}."
        )


__all__ = [
    "FALLBACK_EXPLANATION",
    "MatchExplainer",
    "GeminiMatchExplainer",
    "TemplateMatchExplainer",
]
