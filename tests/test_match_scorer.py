"""Match scorer behaviour on the reference pairs."""

from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from lostfound_app.config import MatchingConfig  # noqa: E402
from logic.match_scorer import MatchScorer  # noqa: E402
from models.item import DominantColor, ImageFeatureSet, Item, ItemType, Label, NormalizedItem, ProcessedItem  # noqa: E402
from models.match import SimilarityBreakdown  # noqa: E402
from tools.match_explainer import FALLBACK_EXPLANATION, MatchExplainer  # noqa: E402
from tools.semantic_comparer import SemanticComparer  # noqa: E402


class StubComparer(SemanticComparer):
    def __init__(self, value: float = 0.9) -> None:
        self.value = value
        self.calls = []

    def compare_semantic(self, text_a: str, text_b: str) -> float:
        self.calls.append((text_a, text_b))
        return self.value


class FailingComparer(SemanticComparer):
    def compare_semantic(self, text_a: str, text_b: str) -> float:
        raise TimeoutError("comparison timed out")


class CountingExplainer(MatchExplainer):
    def __init__(self, text: str = "Both are red Apple watches.") -> None:
        self.text = text
        self.calls = []

    def explain_match(self, lost_item: Item, found_item: Item, breakdown: SimilarityBreakdown) -> str:
        self.calls.append((lost_item.id, found_item.id))
        return self.text


def _processed(item_id, item_type, labels, color, category, features, description="") -> ProcessedItem:
    item = Item(
        id=item_id,
        type=item_type,
        title=item_id.replace("_", " "),
        description=description or f"{item_id} description",
        image_ref=f"images/{item_id}.jpg",
        created_by="user1",
    )
    image_features = ImageFeatureSet(
        labels=tuple(Label(text, 0.9) for text in labels),
        colors=(DominantColor(*color, pixel_fraction=0.7),),
    )
    normalized = NormalizedItem(description=item.description, category=category, features=tuple(features))
    return ProcessedItem(item=item, image_features=image_features, normalized=normalized)


def _watch_pair():
    lost = _processed(
        "lost_watch",
        ItemType.LOST,
        ["watch", "wearable"],
        (200, 20, 20),
        "electronics",
        ["apple", "watch", "series 8", "red", "sport band"],
    )
    found = _processed(
        "found_watch",
        ItemType.FOUND,
        ["watch", "wearable"],
        (210, 15, 25),
        "electronics",
        ["apple", "watch", "series 8", "red", "leather"],
    )
    return lost, found


def _jacket_and_watch():
    lost = _processed("lost_jacket", ItemType.LOST, ["jacket", "clothing"], (220, 20, 20), "clothing", ["red", "jacket", "puffy"])
    found = _processed("found_watch", ItemType.FOUND, ["watch", "wearable"], (30, 30, 200), "electronics", ["blue", "watch", "band"])
    return lost, found


def test_matching_watches_score_high_and_are_explained() -> None:
    explainer = CountingExplainer()
    scorer = MatchScorer(StubComparer(0.9), explainer)
    lost, found = _watch_pair()

    score = scorer.score(lost, found)

    assert score.passed
    assert score.confidence_score >= 0.8
    assert score.explanation == "Both are red Apple watches."
    assert score.breakdown.image_similarity > 0.75
    assert score.breakdown.text_similarity > 0.75
    assert score.breakdown.metadata_similarity > 0.75
    assert explainer.calls == [("lost_watch", "found_watch")]


def test_unrelated_items_never_reach_the_explainer() -> None:
    explainer = CountingExplainer()
    scorer = MatchScorer(StubComparer(0.1), explainer)
    lost, found = _jacket_and_watch()

    score = scorer.score(lost, found)

    assert not score.passed
    assert score.confidence_score < 0.4
    assert score.explanation == ""
    assert explainer.calls == []


def test_comparer_failure_scores_text_as_zero() -> None:
    scorer = MatchScorer(FailingComparer(), CountingExplainer())
    lost, found = _watch_pair()

    score = scorer.score(lost, found)

    assert score.breakdown.text_similarity == 0.0
    assert 0.0 <= score.confidence_score <= 1.0
    expected = score.breakdown.image_similarity * 0.4 + score.breakdown.metadata_similarity * 0.2
    assert score.confidence_score == pytest.approx(expected)


def test_confidence_is_the_weighted_sum_and_clamped() -> None:
    scorer = MatchScorer(StubComparer(), CountingExplainer(), MatchingConfig(image_weight=2, text_weight=2, metadata_weight=2))
    assert scorer.confidence(SimilarityBreakdown(0.9, 0.9, 0.9)) == 1.0

    default = MatchScorer(StubComparer(), CountingExplainer())
    assert default.confidence(SimilarityBreakdown(0.5, 0.25, 1.0)) == pytest.approx(0.5 * 0.4 + 0.25 * 0.4 + 0.2)


def test_threshold_is_inclusive() -> None:
    explainer = CountingExplainer()
    config = MatchingConfig(image_weight=0, text_weight=1, metadata_weight=0, confidence_threshold=0.5)
    scorer = MatchScorer(StubComparer(0.5), explainer, config)
    lost, found = _watch_pair()

    score = scorer.score(lost, found)

    assert score.passed
    assert len(explainer.calls) == 1


def test_comparer_receives_raw_descriptions() -> None:
    comparer = StubComparer()
    scorer = MatchScorer(comparer, CountingExplainer())
    lost, found = _watch_pair()

    scorer.score(lost, found)

    assert comparer.calls == [(lost.item.description, found.item.description)]


def test_blank_explanation_falls_back_to_default_text() -> None:
    scorer = MatchScorer(StubComparer(0.9), CountingExplainer(text="   "))
    lost, found = _watch_pair()

    assert scorer.score(lost, found).explanation == FALLBACK_EXPLANATION
