"""Deterministic similarity signals between a lost and a found item.

Image and metadata similarity are pure functions of their inputs. Text
similarity is delegated to a :class:`SemanticComparer` and degrades to 0 when the
comparer fails.
"""

from __future__ import annotations

import math
from typing import List, Sequence

from models.item import DominantColor, ImageFeatureSet, Label, NormalizedItem
from models.match import clamp01
from tools.semantic_comparer import SemanticComparer

IMAGE_WEIGHTS = {
    "labels": 0.6,
    "color": 0.4,
}
CATEGORY_MATCH_SCORE = 0.5
FEATURE_OVERLAP_WEIGHT = 0.5
MAX_COLOR_DISTANCE = 255 * math.sqrt(3)


def _dice(common: int, size_a: int, size_b: int) -> float:
    total = size_a + size_b
    if total == 0:
        return 0.0
    return 2 * common / total


def label_similarity(labels_a: Sequence[Label], labels_b: Sequence[Label]) -> float:
    """Dice coefficient over the lower-cased label sets (membership, not multiplicity)."""

    set_a = {label.description.strip().lower() for label in labels_a}
    set_b = {label.description.strip().lower() for label in labels_b}
    return _dice(len(set_a & set_b), len(set_a), len(set_b))


def color_similarity(color_a: DominantColor, color_b: DominantColor) -> float:
    """One minus the RGB distance normalised by the widest possible distance."""

    distance = math.dist(color_a.rgb, color_b.rgb)
    return clamp01(1 - distance / MAX_COLOR_DISTANCE)


def image_similarity(features_a: ImageFeatureSet, features_b: ImageFeatureSet) -> float:
    """Combine label overlap and dominant color closeness.

    The color term only contributes when both images have a dominant color; a
    missing color skips the term rather than scoring it as 0.
    """

    score = label_similarity(features_a.labels, features_b.labels) * IMAGE_WEIGHTS["labels"]

    color_a, color_b = features_a.dominant_color, features_b.dominant_color
    if color_a is not None and color_b is not None:
        score += color_similarity(color_a, color_b) * IMAGE_WEIGHTS["color"]

    return clamp01(score)


def features_related(feature_a: str, feature_b: str) -> bool:
    """Two features are related when either contains the other (case-insensitive)."""

    a, b = feature_a.lower(), feature_b.lower()
    if not a or not b:
        return False
    return a in b or b in a


def related_feature_pairs(features_a: Sequence[str], features_b: Sequence[str]) -> int:
    """Size of a maximum one-to-one pairing of related features.

    Each feature on either side is used at most once, so several broad features
    cannot all claim the same counterpart and the Dice ratio stays within 1.
    """

    left: List[str] = [feature.lower() for feature in features_a]
    right: List[str] = [feature.lower() for feature in features_b]
    owner = [-1] * len(right)

    def augment(index: int, visited: set[int]) -> bool:
        for j, candidate in enumerate(right):
            if j in visited or not features_related(left[index], candidate):
                continue
            visited.add(j)
            if owner[j] == -1 or augment(owner[j], visited):
                owner[j] = index
                return True
        return False

    return sum(1 for index in range(len(left)) if augment(index, set()))


def feature_overlap(features_a: Sequence[str], features_b: Sequence[str]) -> float:
    common = related_feature_pairs(features_a, features_b)
    return clamp01(_dice(common, len(features_a), len(features_b)))


def metadata_similarity(normalized_a: NormalizedItem, normalized_b: NormalizedItem) -> float:
    """Category agreement (0.5) plus weighted feature overlap (up to 0.5)."""

    score = CATEGORY_MATCH_SCORE if normalized_a.category == normalized_b.category else 0.0
    score += feature_overlap(normalized_a.features, normalized_b.features) * FEATURE_OVERLAP_WEIGHT
    return clamp01(score)


def text_similarity(comparer: SemanticComparer, description_a: str, description_b: str) -> float:
    """Semantic similarity of two descriptions; collaborator failures resolve to 0."""

    return clamp01(comparer.compare_or_fallback(description_a, description_b))


__all__ = [
    "IMAGE_WEIGHTS",
    "CATEGORY_MATCH_SCORE",
    "FEATURE_OVERLAP_WEIGHT",
    "MAX_COLOR_DISTANCE",
    "label_similarity",
    "color_similarity",
    "image_similarity",
    "features_related",
    "related_feature_pairs",
    "feature_overlap",
    "metadata_similarity",
    "text_similarity",
]
