"""Score a newly submitted item against a pool of opposite-type candidates."""

from __future__ import annotations

import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from lostfound_app.config import MatchingConfig
from lostfound_app.logging_config import get_logger, log_event
from logic.match_scorer import MatchScorer
from models.errors import ValidationFailure
from models.item import ImageFeatureSet, Item, ItemStatus, ItemType, NormalizedItem, ProcessedItem
from models.match import Match, MatchScore


LOGGER = get_logger(__name__)

Candidate = Union[ProcessedItem, Tuple[Item, ImageFeatureSet, NormalizedItem]]


@dataclass
class OrchestrationReport:
    """Matches emitted by one run plus every candidate's score or failure."""

    matches: List[Match] = field(default_factory=list)
    scored: Dict[str, MatchScore] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)


def _as_processed(candidate: Candidate) -> ProcessedItem:
    if isinstance(candidate, ProcessedItem):
        return candidate
    item, image_features, normalized = candidate
    return ProcessedItem(item=item, image_features=image_features, normalized=normalized)


class MatchOrchestrator:
    """Top-level matching entry point.

    The candidate pool is snapshotted at the start of a run. Each pair is scored
    independently; a failing pair is reported and skipped while the rest of the
    pool is still scored. With ``max_concurrency > 1`` pairs are scored on a
    bounded thread pool, which also bounds in-flight collaborator calls.
    """

    def __init__(self, scorer: MatchScorer, config: MatchingConfig | None = None) -> None:
        self.scorer = scorer
        self.config = config or scorer.config

    def eligible_candidates(self, new_item: Item, candidates: Iterable[Candidate]) -> List[ProcessedItem]:
        """Open, opposite-type candidates with each (lost, found) pair kept once."""

        eligible: List[ProcessedItem] = []
        seen_pairs: set[tuple[str, str]] = set()
        for candidate in candidates:
            processed = _as_processed(candidate)
            item = processed.item
            if item.id == new_item.id or item.type is not new_item.type.opposite:
                continue
            if item.status is not ItemStatus.OPEN:
                continue
            pair = self._pair_ids(new_item, item)
            if pair in seen_pairs:
                continue
            seen_pairs.add(pair)
            eligible.append(processed)
        return eligible

    @staticmethod
    def _pair_ids(new_item: Item, other: Item) -> tuple[str, str]:
        if new_item.type is ItemType.LOST:
            return (new_item.id, other.id)
        return (other.id, new_item.id)

    @staticmethod
    def _orient(new: ProcessedItem, candidate: ProcessedItem) -> tuple[ProcessedItem, ProcessedItem]:
        if new.item.type is ItemType.LOST:
            return new, candidate
        return candidate, new

    def _score_pair(self, new: ProcessedItem, candidate: ProcessedItem) -> MatchScore:
        lost, found = self._orient(new, candidate)
        return self.scorer.score(lost, found)

    def _score_all(
        self, new: ProcessedItem, pool: Sequence[ProcessedItem]
    ) -> List[tuple[ProcessedItem, MatchScore | None, BaseException | None]]:
        outcomes: List[tuple[ProcessedItem, MatchScore | None, BaseException | None]] = []
        workers = min(self.config.max_concurrency, len(pool))

        if workers <= 1:
            for candidate in pool:
                try:
                    outcomes.append((candidate, self._score_pair(new, candidate), None))
                except Exception as exc:  # noqa: BLE001
                    outcomes.append((candidate, None, exc))
            return outcomes

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="match-scorer") as executor:
            futures = [
                (candidate, executor.submit(contextvars.copy_context().run, self._score_pair, new, candidate))
                for candidate in pool
            ]
            for candidate, future in futures:
                try:
                    outcomes.append((candidate, future.result(), None))
                except Exception as exc:  # noqa: BLE001
                    outcomes.append((candidate, None, exc))
        return outcomes

    def orchestrate_with_report(
        self,
        new_item: Item,
        new_image_features: ImageFeatureSet,
        new_normalized: NormalizedItem,
        candidates: Iterable[Candidate],
    ) -> OrchestrationReport:
        if not isinstance(new_item, Item):
            raise ValidationFailure("new_item must be an Item")

        new = ProcessedItem(item=new_item, image_features=new_image_features, normalized=new_normalized)
        pool = tuple(self.eligible_candidates(new_item, candidates))
        report = OrchestrationReport()

        for candidate, score, error in self._score_all(new, pool):
            candidate_id = candidate.item.id
            if error is not None:
                report.failures[candidate_id] = f"{type(error).__name__}: {error}"
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "candidate_scoring_failed",
                    item_id=new_item.id,
                    candidate_id=candidate_id,
                    error=type(error).__name__,
                )
                continue

            report.scored[candidate_id] = score
            if not score.passed:
                continue
            lost_id, found_id = self._pair_ids(new_item, candidate.item)
            report.matches.append(
                Match(
                    lost_item_id=lost_id,
                    found_item_id=found_id,
                    confidence_score=score.confidence_score,
                    explanation=score.explanation,
                    breakdown=score.breakdown,
                )
            )

        log_event(
            LOGGER,
            logging.INFO,
            "orchestration_completed",
            item_id=new_item.id,
            candidate_count=len(pool),
            match_count=len(report.matches),
            failure_count=len(report.failures),
        )
        return report

    def orchestrate(
        self,
        new_item: Item,
        new_image_features: ImageFeatureSet,
        new_normalized: NormalizedItem,
        candidates: Iterable[Candidate],
    ) -> List[Match]:
        """Return the pending matches for ``new_item`` that reach the threshold."""

        return self.orchestrate_with_report(new_item, new_image_features, new_normalized, candidates).matches


__all__ = ["MatchOrchestrator", "OrchestrationReport", "Candidate"]
