"""Text normalizer capability: standardised description, category and features."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

from pydantic import BaseModel, ValidationError

from lostfound_app.logging_config import get_logger, log_event
from models.errors import NormalizationError
from models.item import Label, NormalizedItem
from models.taxonomy import COLOR_MAP, MAX_FEATURES
from tools.gemini_client import GeminiClient, extract_json_object
from tools.observability import instrument_collaborator


LOGGER = get_logger(__name__)


class _NormalizationPayload(BaseModel):
    normalized_description: str | None = None
    category: str | None = None
    features: List[str] = []
    colors: List[str] = []


class TextNormalizer(ABC):
    """Abstract text normalizer interface."""

    @abstractmethod
    def normalize_description(self, description: str, labels: Sequence[Label]) -> NormalizedItem:
        """Return a normalized view of a free-text description and detected labels."""

    def normalize_or_fallback(self, description: str, labels: Sequence[Label]) -> NormalizedItem:
        """Normalize, degrading to :meth:`NormalizedItem.fallback` on any failure."""

        try:
            return self.normalize_description(description, labels)
        except Exception as exc:  # noqa: BLE001
            log_event(
                LOGGER,
                logging.WARNING,
                "normalization_fallback",
                normalizer=type(self).__name__,
                error=type(exc).__name__,
            )
            return NormalizedItem.fallback(description)


def _labels_text(labels: Sequence[Label]) -> str:
    return ", ".join(f"{label.description} ({label.confidence * 100:.1f}%)" for label in labels)


class GeminiTextNormalizer(TextNormalizer):
    """Gemini-backed normalizer that asks for a JSON summary of the report."""

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    def _prompt(self, description: str, labels: Sequence[Label]) -> str:
        return (
            "You are analyzing a lost or found item description for a campus lost & found system.\n\n"
            f'Description: "{description}"\n'
            f"Detected visual features: {_labels_text(labels)}\n\n"
            "Please provide:\n"
            "1. A normalized, standardized description (2-3 sentences)\n"
            "2. The primary item category (electronics, clothing, accessories, documents, other)\n"
            f"3. Key identifying features (max {MAX_FEATURES} bullet points)\n"
            "4. Color(s) if mentioned or detected\n\n"
            "Respond in JSON format:\n"
            "{\n"
            '  "normalized_description": "...",\n'
            '  "category": "...",\n'
            '  "features": ["...", "..."],\n'
            '  "colors": ["..."]\n'
            "}"
        )

    @instrument_collaborator("text_normalizer")
    def normalize_description(self, description: str, labels: Sequence[Label]) -> NormalizedItem:
        try:
            reply = self.client.generate(self._prompt(description, labels))
            payload = _NormalizationPayload.model_validate(extract_json_object(reply))
        except (ValueError, ValidationError) as exc:
            raise NormalizationError(f"Unparseable normalization reply: {exc}", cause=exc) from exc
        except Exception as exc:  # noqa: BLE001
            raise NormalizationError(f"Gemini normalization failed: {exc}", cause=exc) from exc

        return NormalizedItem(
            description=payload.normalized_description or description,
            category=payload.category,
            features=tuple(payload.features),
            colors=tuple(payload.colors),
        )


_STOP_WORDS = {
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    "my", "i", "it", "is", "was", "has", "have", "had", "this", "that", "near", "lost", "found",
    "from", "be", "very", "some", "somewhere", "looks", "appears", "inside", "its", "one",
}

_CATEGORY_KEYWORDS: Dict[str, set] = {
    "electronics": {"phone", "laptop", "watch", "smartwatch", "airpods", "earbuds", "headphones", "charger",
                    "tablet", "ipad", "calculator", "electronic", "device", "macbook", "kindle"},
    "clothing": {"jacket", "coat", "hoodie", "sweater", "shirt", "scarf", "hat", "cap", "gloves", "jeans",
                 "clothing", "shoes", "sneakers"},
    "accessories": {"backpack", "bag", "wallet", "keys", "keychain", "umbrella", "bottle", "glasses",
                    "sunglasses", "ring", "necklace", "bracelet", "purse", "luggage"},
    "documents": {"id", "card", "passport", "license", "notebook", "book", "document", "documents",
                  "textbook", "folder", "certificate"},
}


def _tokenise(text: str) -> List[str]:
    return [token for token in re.split(r"[^a-zA-Z0-9]+", text.lower()) if token]


class KeywordTextNormalizer(TextNormalizer):
    """Deterministic offline normalizer built on keyword lists and detected labels."""

    @instrument_collaborator("text_normalizer")
    def normalize_description(self, description: str, labels: Sequence[Label]) -> NormalizedItem:
        tokens = _tokenise(description) + [
            token for label in labels for token in _tokenise(label.description)
        ]

        scores = {category: sum(token in words for token in tokens) for category, words in _CATEGORY_KEYWORDS.items()}
        best = max(scores, key=lambda category: scores[category])
        category = best if scores[best] > 0 else "other"

        colors = [token for token in tokens if token in COLOR_MAP]
        features: List[str] = [label.description for label in labels[:2]]
        features += [token for token in _tokenise(description) if token not in _STOP_WORDS and len(token) > 2]

        return NormalizedItem(
            description=" ".join(description.split()),
            category=category,
            features=tuple(features),
            colors=tuple(colors),
        )


__all__ = ["TextNormalizer", "GeminiTextNormalizer", "KeywordTextNormalizer"]
