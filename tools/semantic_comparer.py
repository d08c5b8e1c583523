"""Semantic comparison capability for two item descriptions."""

from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod

from lostfound_app.logging_config import get_logger, log_event
from models.errors import SemanticComparisonError
from models.match import clamp01
from tools.gemini_client import GeminiClient, parse_leading_float
from tools.observability import instrument_collaborator


LOGGER = get_logger(__name__)

FALLBACK_TEXT_SIMILARITY = 0.0


class SemanticComparer(ABC):
    """Abstract semantic comparison interface."""

    @abstractmethod
    def compare_semantic(self, text_a: str, text_b: str) -> float:
        """Return how similar two descriptions are, in [0, 1]."""

    def compare_or_fallback(self, text_a: str, text_b: str) -> float:
        """Compare, degrading to :data:`FALLBACK_TEXT_SIMILARITY` on failure or junk output."""

        try:
            raw = self.compare_semantic(text_a, text_b)
        except Exception as exc:  # noqa: BLE001
            log_event(
                LOGGER,
                logging.WARNING,
                "text_similarity_fallback",
                comparer=type(self).__name__,
                error=type(exc).__name__,
            )
            return FALLBACK_TEXT_SIMILARITY

        if isinstance(raw, bool) or not isinstance(raw, (int, float)) or math.isnan(raw):
            log_event(
                LOGGER,
                logging.WARNING,
                "text_similarity_fallback",
                comparer=type(self).__name__,
                error="non_numeric_output",
            )
            return FALLBACK_TEXT_SIMILARITY
        return clamp01(raw)


class GeminiSemanticComparer(SemanticComparer):
    """Gemini-backed comparer that asks for a bare similarity number."""

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    @staticmethod
    def _prompt(text_a: str, text_b: str) -> str:
        return (
            "Compare these two item descriptions for a lost & found system.\n"
            "How similar are they? Consider the objects described, colors, materials, and identifying features.\n\n"
            f'Item 1: "{text_a}"\n'
            f'Item 2: "{text_b}"\n\n'
            "Respond with ONLY a number between 0 and 1 (e.g., 0.85) representing the similarity."
        )

    @instrument_collaborator("semantic_comparer")
    def compare_semantic(self, text_a: str, text_b: str) -> float:
        try:
            reply = self.client.generate(self._prompt(text_a, text_b))
        except Exception as exc:  # noqa: BLE001
            raise SemanticComparisonError(f"Gemini comparison failed: {exc}", cause=exc) from exc

        score = parse_leading_float(reply)
        if score is None:
            raise SemanticComparisonError(f"Non-numeric similarity reply: {reply[:40]!r}")
        return clamp01(score)


def _tokens(text: str) -> set[str]:
    return {token for token in re.split(r"[^a-z0-9]+", (text or "").lower()) if len(token) > 2}


class TokenOverlapComparer(SemanticComparer):
    """Offline comparer using Jaccard overlap of description tokens."""

    @instrument_collaborator("semantic_comparer")
    def compare_semantic(self, text_a: str, text_b: str) -> float:
        tokens_a, tokens_b = _tokens(text_a), _tokens(text_b)
        if not tokens_a or not tokens_b:
            return 0.0
        return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


__all__ = [
    "FALLBACK_TEXT_SIMILARITY",
    "SemanticComparer",
    "GeminiSemanticComparer",
    "TokenOverlapComparer",
]
