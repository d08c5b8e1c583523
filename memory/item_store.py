"""Item and match persistence interface with an in-memory implementation."""
from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
from uuid import uuid4

from models.errors import ValidationFailure
from models.item import ImageFeatureSet, Item, ItemStatus, ItemType, NormalizedItem, ProcessedItem
from models.match import Match

DEFAULT_CANDIDATE_LIMIT = 50
DEFAULT_LIST_LIMIT = 20
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ItemStore:
    """Interface for item and match persistence."""

    def create_item(
        self,
        item_type: ItemType,
        title: str,
        description: str,
        image_ref: str,
        created_by: str,
    ) -> Item:
        raise NotImplementedError

    def get_item(self, item_id: str) -> Item:
        raise NotImplementedError

    def find_item(self, item_id: str) -> Optional[Item]:
        raise NotImplementedError

    def list_items(
        self,
        status: ItemStatus = ItemStatus.OPEN,
        item_type: Optional[ItemType] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> List[Item]:
        raise NotImplementedError

    def record_processing(self, item_id: str, image_features: ImageFeatureSet, normalized: NormalizedItem) -> Item:
        raise NotImplementedError

    def record_processing_error(self, item_id: str, message: str) -> Item:
        raise NotImplementedError

    def open_candidates(self, item_type: ItemType, limit: int = DEFAULT_CANDIDATE_LIMIT) -> List[ProcessedItem]:
        raise NotImplementedError

    def save_matches(self, matches: Iterable[Match]) -> List[Match]:
        raise NotImplementedError

    def get_match(self, match_id: str) -> Match:
        raise NotImplementedError

    def matches_for_item(self, item_id: str) -> List[Match]:
        raise NotImplementedError

    def resolve_match(self, match_id: str) -> Match:
        raise NotImplementedError


class InMemoryItemStore(ItemStore):
    """Dictionary-backed store for local runs, evaluation and tests.

    The lock only guards dictionary mutation; callers never hold it across a
    collaborator call.
    """

    def __init__(self) -> None:
        self._items: Dict[str, Item] = {}
        self._matches: Dict[str, Match] = {}
        self._lock = threading.Lock()

    def create_item(
        self,
        item_type: ItemType,
        title: str,
        description: str,
        image_ref: str,
        created_by: str,
    ) -> Item:
        item_type = ItemType(item_type)
        item = Item(
            id=f"{item_type.value}_{uuid4().hex[:8]}",
            type=item_type,
            title=title,
            description=description,
            image_ref=image_ref,
            created_by=created_by,
            created_at=_now(),
        )
        with self._lock:
            self._items[item.id] = item
        return item

    def get_item(self, item_id: str) -> Item:
        try:
            return self._items[item_id]
        except KeyError as exc:
            raise ValidationFailure(f"Unknown item {item_id}") from exc

    def find_item(self, item_id: str) -> Optional[Item]:
        return self._items.get(item_id)

    def _newest_first(self, items: Iterable[Item]) -> List[Item]:
        # Insertion order breaks ties between equal timestamps.
        ranked = sorted(
            enumerate(items),
            key=lambda pair: (pair[1].created_at or _EPOCH, pair[0]),
            reverse=True,
        )
        return [item for _, item in ranked]

    def list_items(
        self,
        status: ItemStatus = ItemStatus.OPEN,
        item_type: Optional[ItemType] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> List[Item]:
        """Items with ``status`` (and ``item_type`` when given), newest first."""

        status = ItemStatus(status)
        item_type = ItemType(item_type) if item_type is not None else None
        if limit < 1:
            raise ValidationFailure(f"limit must be positive, got {limit}")
        with self._lock:
            selected = [
                item
                for item in self._items.values()
                if item.status is status and (item_type is None or item.type is item_type)
            ]
        return self._newest_first(selected)[:limit]

    def record_processing(self, item_id: str, image_features: ImageFeatureSet, normalized: NormalizedItem) -> Item:
        with self._lock:
            item = self.get_item(item_id)
            item.image_features = image_features
            item.normalized = normalized
            item.processing_error = None
            item.processed_at = _now()
        return item

    def record_processing_error(self, item_id: str, message: str) -> Item:
        with self._lock:
            item = self.get_item(item_id)
            item.processing_error = message
        return item

    def open_candidates(self, item_type: ItemType, limit: int = DEFAULT_CANDIDATE_LIMIT) -> List[ProcessedItem]:
        """Snapshot of the newest ``limit`` open, processed items of ``item_type``."""

        with self._lock:
            items = [
                replace(item)
                for item in self._items.values()
                if item.type is item_type and item.status is ItemStatus.OPEN and item.is_processed
            ]
        return [ProcessedItem.from_item(item) for item in self._newest_first(items)[:limit]]

    def save_matches(self, matches: Iterable[Match]) -> List[Match]:
        saved: List[Match] = []
        with self._lock:
            for match in matches:
                match.match_id = match.match_id or f"match_{uuid4().hex[:12]}"
                match.created_at = match.created_at or _now()
                self._matches[match.match_id] = match
                saved.append(match)
        return saved

    def get_match(self, match_id: str) -> Match:
        try:
            return self._matches[match_id]
        except KeyError as exc:
            raise ValidationFailure(f"Unknown match {match_id}") from exc

    def matches_for_item(self, item_id: str) -> List[Match]:
        """Matches referencing ``item_id``, highest confidence first."""

        self.get_item(item_id)
        with self._lock:
            related = [match for match in self._matches.values() if match.involves(item_id)]
        return sorted(related, key=lambda match: match.confidence_score, reverse=True)

    def resolve_match(self, match_id: str, when: Optional[datetime] = None) -> Match:
        """Confirm a match and mark both referenced items as matched."""

        when = when or _now()
        with self._lock:
            match = self.get_match(match_id)
            items = [self.get_item(item_id) for item_id in match.pair]
            match.resolve(when)
            for item in items:
                item.status = ItemStatus.MATCHED
                item.matched_at = when
        return match


__all__ = ["DEFAULT_CANDIDATE_LIMIT", "DEFAULT_LIST_LIMIT", "ItemStore", "InMemoryItemStore"]
