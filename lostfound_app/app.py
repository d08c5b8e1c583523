"""Lost & found app bootstrap."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from lostfound_app.config import AppConfig
from lostfound_app.logging_config import configure_logging, get_logger, log_event, operation_context
from logic.item_processing import ItemProcessor
from logic.match_orchestrator import MatchOrchestrator
from logic.match_scorer import MatchScorer
from logic.validation import ItemSubmission, submission_failure
from memory.item_store import DEFAULT_LIST_LIMIT, InMemoryItemStore, ItemStore
from models.errors import ConfigurationFailure, FeatureExtractionError, ValidationFailure
from models.item import ItemStatus, ItemType
from tools.feature_extractor import FeatureExtractor, VisionFeatureExtractor
from tools.gemini_client import GeminiClient
from tools.match_explainer import GeminiMatchExplainer, MatchExplainer, TemplateMatchExplainer
from tools.semantic_comparer import GeminiSemanticComparer, SemanticComparer, TokenOverlapComparer
from tools.text_normalizer import GeminiTextNormalizer, KeywordTextNormalizer, TextNormalizer


LOGGER = get_logger(__name__)


class LostFoundApp:
    """Wires together the item store, AI collaborators and the matching engine.

    Gemini-backed collaborators are used when an API key is configured,
    otherwise the offline text collaborators are wired in. Image features come
    from Cloud Vision when ``use_cloud_vision`` is set; without it an extractor
    must be injected. Any collaborator can be injected directly.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        store: ItemStore | None = None,
        extractor: FeatureExtractor | None = None,
        normalizer: TextNormalizer | None = None,
        comparer: SemanticComparer | None = None,
        explainer: MatchExplainer | None = None,
    ) -> None:
        self.config = config or AppConfig.from_env()
        configure_logging()

        timeout = self.config.matching.collaborator_timeout_seconds
        gemini = None
        if self.config.api_key:
            gemini = GeminiClient(
                api_key=self.config.api_key,
                model_name=self.config.model,
                timeout_seconds=timeout,
            )

        self.store = store or InMemoryItemStore()
        self.extractor = extractor or self._build_extractor(timeout)
        self.normalizer = normalizer or (GeminiTextNormalizer(gemini) if gemini else KeywordTextNormalizer())
        self.comparer = comparer or (GeminiSemanticComparer(gemini) if gemini else TokenOverlapComparer())
        self.explainer = explainer or (GeminiMatchExplainer(gemini) if gemini else TemplateMatchExplainer())

        self.scorer = MatchScorer(self.comparer, self.explainer, config=self.config.matching)
        self.orchestrator = MatchOrchestrator(self.scorer)
        self.processor = ItemProcessor(
            self.store,
            self.extractor,
            self.normalizer,
            self.orchestrator,
            candidate_limit=self.config.matching.candidate_limit,
        )

        log_event(
            LOGGER,
            logging.INFO,
            "app_initialised",
            environment=self.config.environment,
            gemini_enabled=gemini is not None,
            extractor=type(self.extractor).__name__,
        )

    def _build_extractor(self, timeout: float) -> FeatureExtractor:
        if not self.config.use_cloud_vision:
            raise ConfigurationFailure(
                "No image feature extractor: enable use_cloud_vision or pass an extractor"
            )
        return VisionFeatureExtractor(timeout_seconds=timeout)

    def submit_item(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Validate, store and process a new report, returning a status payload."""

        with operation_context("app:submit_item") as correlation_id:
            try:
                submission = ItemSubmission.model_validate(payload)
            except ValidationError as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "app_request_invalid",
                    method="submit_item",
                    details=str(exc),
                    correlation_id=correlation_id,
                )
                return submission_failure(exc)

            item = self.store.create_item(
                submission.item_type,
                title=submission.title,
                description=submission.description,
                image_ref=submission.image_ref,
                created_by=submission.user_id,
            )

            try:
                result = self.processor.process_item(item.id)
            except FeatureExtractionError as exc:
                return {
                    "status": "error",
                    "item_id": item.id,
                    "message": f"Image analysis failed: {exc}",
                }

            return {
                "status": "ok",
                "item_id": item.id,
                "category": result.item.normalized.category,
                "match_count": len(result.matches),
                "matches": [match.to_dict() for match in result.matches],
                "failed_candidates": sorted(result.failures),
            }

    def get_matches(self, item_id: str) -> List[Dict[str, Any]]:
        """Matches involving ``item_id``, highest confidence first, each with the other item's details.

        Matches whose other item is no longer stored are skipped.
        """

        item = self.store.get_item(item_id)
        results: List[Dict[str, Any]] = []
        for match in self.store.matches_for_item(item_id):
            other_id = match.found_item_id if item.type is ItemType.LOST else match.lost_item_id
            other = self.store.find_item(other_id)
            if other is None:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "match_other_item_missing",
                    match_id=match.match_id,
                    item_id=other_id,
                )
                continue
            entry = match.to_dict()
            entry["other_item"] = other.to_dict()
            results.append(entry)
        return results

    def list_items(
        self,
        status: str = ItemStatus.OPEN.value,
        item_type: Optional[str] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> List[Dict[str, Any]]:
        """Reports with ``status`` (optionally only lost or found), newest first."""

        try:
            wanted_status = ItemStatus(status)
            wanted_type = ItemType(item_type) if item_type else None
        except ValueError as exc:
            raise ValidationFailure(str(exc)) from exc
        items = self.store.list_items(wanted_status, wanted_type, limit)
        return [item.to_dict() for item in items]

    def resolve_match(self, match_id: str) -> Dict[str, Any]:
        """Confirm a pending match; both items leave the candidate pool."""

        with operation_context("app:resolve_match") as correlation_id:
            match = self.store.resolve_match(match_id)
            log_event(
                LOGGER,
                logging.INFO,
                "match_resolved",
                match_id=match.match_id,
                lost_item_id=match.lost_item_id,
                found_item_id=match.found_item_id,
                correlation_id=correlation_id,
            )
            return match.to_dict()


__all__ = ["LostFoundApp"]
