"""Processing pipeline run for every newly submitted item."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from lostfound_app.logging_config import get_logger, log_event, operation_context
from logic.match_orchestrator import MatchOrchestrator
from memory.item_store import DEFAULT_CANDIDATE_LIMIT, ItemStore
from models.errors import FeatureExtractionError
from models.item import Item
from models.match import Match
from tools.feature_extractor import FeatureExtractor
from tools.text_normalizer import TextNormalizer


LOGGER = get_logger(__name__)


@dataclass
class ProcessingResult:
    item: Item
    matches: List[Match] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)


class ItemProcessor:
    """Extract features, normalize the description, then match and persist.

    Feature extraction failure is fatal for the item: it is recorded on the item
    and re-raised. Normalization never blocks an item; it falls back to the
    untouched description. Only the newest ``candidate_limit`` open items of the
    opposite type are scored.
    """

    def __init__(
        self,
        store: ItemStore,
        extractor: FeatureExtractor,
        normalizer: TextNormalizer,
        orchestrator: MatchOrchestrator,
        candidate_limit: int = DEFAULT_CANDIDATE_LIMIT,
    ) -> None:
        self.store = store
        self.extractor = extractor
        self.normalizer = normalizer
        self.orchestrator = orchestrator
        self.candidate_limit = candidate_limit

    def process_item(self, item_id: str) -> ProcessingResult:
        with operation_context("process_item", item_id=item_id) as correlation_id:
            item = self.store.get_item(item_id)
            log_event(
                LOGGER,
                logging.INFO,
                "item_processing_started",
                item_id=item.id,
                item_type=item.type.value,
                correlation_id=correlation_id,
            )

            try:
                image_features = self.extractor.extract_features(item.image_ref)
            except Exception as exc:
                error = exc if isinstance(exc, FeatureExtractionError) else FeatureExtractionError(str(exc), cause=exc)
                self.store.record_processing_error(item.id, str(error))
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "feature_extraction_failed",
                    item_id=item.id,
                    error=type(exc).__name__,
                    correlation_id=correlation_id,
                )
                if error is exc:
                    raise
                raise error from exc

            normalized = self.normalizer.normalize_or_fallback(item.description, image_features.labels)
            item = self.store.record_processing(item.id, image_features, normalized)

            candidates = self.store.open_candidates(item.type.opposite, limit=self.candidate_limit)
            report = self.orchestrator.orchestrate_with_report(item, image_features, normalized, candidates)
            saved = self.store.save_matches(report.matches)

            log_event(
                LOGGER,
                logging.INFO,
                "item_processing_completed",
                item_id=item.id,
                category=normalized.category,
                match_count=len(saved),
                correlation_id=correlation_id,
            )
            return ProcessingResult(item=item, matches=saved, failures=dict(report.failures))


__all__ = ["ItemProcessor", "ProcessingResult"]
