"""Similarity signal coverage: bounds, symmetry and the metadata reference cases."""

from pathlib import Path
import random
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic.similarity import (  # noqa: E402
    color_similarity,
    feature_overlap,
    image_similarity,
    label_similarity,
    metadata_similarity,
    related_feature_pairs,
    text_similarity,
)
from models.item import DominantColor, ImageFeatureSet, Label, NormalizedItem  # noqa: E402
from tools.semantic_comparer import SemanticComparer  # noqa: E402


WORDS = ["watch", "wearable", "bag", "backpack", "phone", "case", "red", "blue", "apple", "band", "jacket"]


def _features(rng: random.Random) -> ImageFeatureSet:
    labels = [Label(word, rng.random()) for word in rng.sample(WORDS, rng.randint(0, 5))]
    colors = [
        DominantColor(rng.randint(0, 255), rng.randint(0, 255), rng.randint(0, 255), rng.random())
        for _ in range(rng.randint(0, 3))
    ]
    return ImageFeatureSet(labels=tuple(labels), colors=tuple(colors))


def _normalized(rng: random.Random) -> NormalizedItem:
    return NormalizedItem(
        description="item",
        category=rng.choice(["electronics", "clothing", "accessories"]),
        features=tuple(rng.sample(WORDS, rng.randint(0, 5))),
    )


def _color(red: int, green: int, blue: int, fraction: float = 0.5) -> DominantColor:
    return DominantColor(red=red, green=green, blue=blue, pixel_fraction=fraction)


def test_scores_stay_in_unit_interval_for_random_inputs() -> None:
    rng = random.Random(20240115)
    for _ in range(300):
        a, b = _features(rng), _features(rng)
        assert 0.0 <= image_similarity(a, b) <= 1.0
        assert 0.0 <= metadata_similarity(_normalized(rng), _normalized(rng)) <= 1.0


def test_image_similarity_is_symmetric() -> None:
    rng = random.Random(7)
    for _ in range(200):
        a, b = _features(rng), _features(rng)
        assert image_similarity(a, b) == pytest.approx(image_similarity(b, a))


def test_label_similarity_treats_labels_as_sets() -> None:
    a = [Label("Watch", 0.9), Label("watch ", 0.8), Label("Wearable", 0.7)]
    b = [Label("watch", 0.9), Label("wearable", 0.6)]
    assert label_similarity(a, b) == pytest.approx(1.0)
    assert label_similarity([], []) == 0.0


def test_image_similarity_identical_images_score_one() -> None:
    features = ImageFeatureSet(labels=(Label("watch", 0.9), Label("wearable", 0.8)), colors=(_color(200, 20, 20),))
    assert image_similarity(features, features) == pytest.approx(1.0)


def test_color_term_skipped_when_either_side_has_no_colors() -> None:
    labels = (Label("watch", 0.9),)
    with_color = ImageFeatureSet(labels=labels, colors=(_color(200, 20, 20),))
    without_color = ImageFeatureSet(labels=labels)
    assert image_similarity(with_color, without_color) == pytest.approx(0.6)


def test_only_the_dominant_color_is_compared() -> None:
    a = ImageFeatureSet(colors=(_color(0, 0, 0, 0.2), _color(255, 255, 255, 0.8)))
    b = ImageFeatureSet(colors=(_color(255, 255, 255, 0.9),))
    assert image_similarity(a, b) == pytest.approx(0.4)


def test_color_similarity_extremes() -> None:
    assert color_similarity(_color(0, 0, 0), _color(255, 255, 255)) == pytest.approx(0.0)
    assert color_similarity(_color(10, 20, 30), _color(10, 20, 30)) == pytest.approx(1.0)


def test_metadata_matching_category_with_unrelated_features_is_half() -> None:
    a = NormalizedItem("a", category="electronics", features=("apple", "watch"))
    b = NormalizedItem("b", category="electronics", features=("blue", "case"))
    assert metadata_similarity(a, b) == pytest.approx(0.5)


def test_metadata_identical_features_and_category_is_one() -> None:
    a = NormalizedItem("a", category="accessories", features=("Black", "North Face", "Backpack"))
    b = NormalizedItem("b", category="accessories", features=("black", "north face", "backpack"))
    assert metadata_similarity(a, b) == pytest.approx(1.0)


def test_metadata_both_feature_lists_empty() -> None:
    a = NormalizedItem("a", category="documents")
    b = NormalizedItem("b", category="clothing")
    assert metadata_similarity(a, b) == 0.0


def test_substring_features_are_related_once_each() -> None:
    # "watch" relates to both right-hand entries but can only be paired once.
    assert related_feature_pairs(["watch"], ["smartwatch", "watch band"]) == 1
    assert related_feature_pairs(["band", "watch"], ["watch band"]) == 1
    assert related_feature_pairs(["watch", "band"], ["smartwatch", "sport band"]) == 2
    assert feature_overlap(["watch"], ["smartwatch", "watch band"]) == pytest.approx(2 / 3)


def test_feature_overlap_never_exceeds_one() -> None:
    assert feature_overlap(["a", "b", "c"], ["abc"]) <= 1.0
    assert feature_overlap(["abc"], ["a", "b", "c"]) == pytest.approx(0.5)


class _FixedComparer(SemanticComparer):
    def __init__(self, value):
        self.value = value

    def compare_semantic(self, text_a: str, text_b: str) -> float:
        return self.value


class _FailingComparer(SemanticComparer):
    def compare_semantic(self, text_a: str, text_b: str) -> float:
        raise RuntimeError("model unavailable")


@pytest.mark.parametrize(
    "value, expected",
    [(0.75, 0.75), (1.7, 1.0), (-0.2, 0.0), (float("nan"), 0.0), ("0.9", 0.0), (None, 0.0)],
)
def test_text_similarity_clamps_and_defaults(value, expected) -> None:
    assert text_similarity(_FixedComparer(value), "a", "b") == pytest.approx(expected)


def test_text_similarity_failure_resolves_to_zero() -> None:
    assert text_similarity(_FailingComparer(), "a", "b") == 0.0
