"""Lightweight evaluation harness for deterministic matching scenarios."""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence, Tuple

from evaluation.scenarios import EvaluationScenario, SCENARIOS
from lostfound_app.config import MatchingConfig
from logic.item_processing import ItemProcessor
from logic.match_orchestrator import MatchOrchestrator
from logic.match_scorer import MatchScorer
from memory.item_store import InMemoryItemStore
from models.errors import NormalizationError
from models.item import ItemType, Label, NormalizedItem, image_features_from_raw
from models.match import Match
from tools.feature_extractor import StaticFeatureExtractor
from tools.match_explainer import TemplateMatchExplainer
from tools.semantic_comparer import SemanticComparer
from tools.text_normalizer import TextNormalizer


DEFAULT_TEXT_SIMILARITY = 0.1


class ScriptedTextNormalizer(TextNormalizer):
    """Replays the normalized form recorded for each sample description."""

    def __init__(self, normalized: Mapping[str, NormalizedItem]) -> None:
        self.normalized = dict(normalized)

    def normalize_description(self, description: str, labels: Sequence[Label]) -> NormalizedItem:
        try:
            return self.normalized[description]
        except KeyError as exc:
            raise NormalizationError("No scripted normalization for description") from exc


class ScriptedSemanticComparer(SemanticComparer):
    """Returns recorded similarities for known description pairs, a low default otherwise."""

    def __init__(self, scores: Mapping[frozenset, float], default: float = DEFAULT_TEXT_SIMILARITY) -> None:
        self.scores = dict(scores)
        self.default = default
        self.calls = 0

    def compare_semantic(self, text_a: str, text_b: str) -> float:
        self.calls += 1
        return self.scores.get(frozenset((text_a, text_b)), self.default)


def _description_scores(scenario: EvaluationScenario) -> Dict[frozenset, float]:
    descriptions: Dict[str, str] = {}
    for item in scenario.items:
        descriptions[str(item["title"])] = str(item["description"])
    scores: Dict[frozenset, float] = {}
    for (lost_title, found_title), value in scenario.text_similarity.items():
        if lost_title in descriptions and found_title in descriptions:
            scores[frozenset((descriptions[lost_title], descriptions[found_title]))] = value
    return scores


def _normalized(item: Mapping[str, object]) -> NormalizedItem:
    return NormalizedItem(
        description=str(item.get("normalized_description") or item["description"]),
        category=str(item.get("category", "other")),
        features=tuple(item.get("features", ())),
        colors=tuple(item.get("color_names", ())),
    )


def _evaluate_expectations(
    expectations: Dict[str, object], matches: List[Match], titles: Dict[str, str]
) -> Dict[str, object]:
    checks: Dict[str, bool] = {}
    actual: set[Tuple[str, str]] = {(titles[m.lost_item_id], titles[m.found_item_id]) for m in matches}
    expected = {tuple(pair) for pair in expectations.get("expected_pairs", [])}
    checks["expected_pairs"] = actual == expected
    if "min_confidence" in expectations:
        floor = float(expectations["min_confidence"])
        checks["min_confidence"] = all(match.confidence_score >= floor for match in matches)
    checks["explained"] = all(match.explanation for match in matches)
    return {"passed": all(checks.values()), "checks": checks}


def run_scenario(scenario: EvaluationScenario, config: MatchingConfig | None = None) -> Dict[str, object]:
    config = config or MatchingConfig()
    store = InMemoryItemStore()
    extractor = StaticFeatureExtractor(
        {str(item["image_ref"]): image_features_from_raw(item) for item in scenario.items}
    )
    normalizer = ScriptedTextNormalizer({str(item["description"]): _normalized(item) for item in scenario.items})
    comparer = ScriptedSemanticComparer(_description_scores(scenario))
    scorer = MatchScorer(comparer, TemplateMatchExplainer(), config=config)
    processor = ItemProcessor(store, extractor, normalizer, MatchOrchestrator(scorer))

    titles: Dict[str, str] = {}
    matches: List[Match] = []
    for raw in scenario.items:
        item = store.create_item(
            ItemType(raw["type"]),
            title=str(raw["title"]),
            description=str(raw["description"]),
            image_ref=str(raw["image_ref"]),
            created_by=str(raw["created_by"]),
        )
        titles[item.id] = item.title
        result = processor.process_item(item.id)
        matches.extend(result.matches)
        if scenario.resolve_matches:
            for match in result.matches:
                store.resolve_match(match.match_id)

    evaluation = _evaluate_expectations(scenario.expectations, matches, titles)
    return {
        "scenario": scenario.name,
        "passed": evaluation["passed"],
        "checks": evaluation["checks"],
        "match_count": len(matches),
        "matches": [
            {**match.to_dict(), "lost_title": titles[match.lost_item_id], "found_title": titles[match.found_item_id]}
            for match in matches
        ],
    }


def run_evaluation_suite() -> List[Dict[str, object]]:
    return [run_scenario(scenario) for scenario in SCENARIOS]


def run_smoke_checks() -> List[str]:
    results = run_evaluation_suite()
    return [f"{result['scenario']}: {'passed' if result['passed'] else 'failed'}" for result in results]


__all__ = [
    "ScriptedSemanticComparer",
    "ScriptedTextNormalizer",
    "run_evaluation_suite",
    "run_scenario",
    "run_smoke_checks",
]
