"""In-memory item store: creation, candidates, match persistence and resolution."""

from datetime import datetime, timezone

import pytest

from memory.item_store import InMemoryItemStore
from models.errors import ValidationFailure
from models.item import ImageFeatureSet, ItemStatus, ItemType, Label, NormalizedItem
from models.match import Match, MatchStatus, SimilarityBreakdown


def _store_with_pair():
    store = InMemoryItemStore()
    lost = store.create_item(ItemType.LOST, "Red watch", "Lost a red watch", "images/lost.jpg", "user1")
    found = store.create_item(ItemType.FOUND, "Watch found", "Found a red watch", "images/found.jpg", "user2")
    return store, lost, found


def _match(lost_id: str, found_id: str, confidence: float) -> Match:
    return Match(
        lost_item_id=lost_id,
        found_item_id=found_id,
        confidence_score=confidence,
        breakdown=SimilarityBreakdown(confidence, confidence, confidence),
        explanation="similar",
    )


def test_create_item_assigns_prefixed_ids_and_timestamps() -> None:
    store, lost, found = _store_with_pair()

    assert lost.id.startswith("lost_")
    assert found.id.startswith("found_")
    assert lost.status is ItemStatus.OPEN
    assert lost.created_at is not None
    assert store.get_item(lost.id) is lost
    with pytest.raises(ValidationFailure):
        store.get_item("missing")


def test_open_candidates_only_returns_processed_open_items_of_the_type() -> None:
    store, lost, found = _store_with_pair()
    store.create_item(ItemType.FOUND, "Unprocessed", "Not analysed yet", "images/x.jpg", "user3")
    features = ImageFeatureSet(labels=(Label("watch", 0.9),))

    store.record_processing(found.id, features, NormalizedItem("red watch", category="electronics"))

    candidates = store.open_candidates(ItemType.FOUND)
    assert [candidate.item.id for candidate in candidates] == [found.id]
    assert candidates[0].image_features == features
    assert candidates[0].normalized.category == "electronics"
    assert candidates[0].item is not found
    assert store.open_candidates(ItemType.LOST) == []


def test_processing_error_is_recorded() -> None:
    store, lost, _ = _store_with_pair()
    store.record_processing_error(lost.id, "Vision unavailable")
    assert store.get_item(lost.id).processing_error == "Vision unavailable"
    assert not store.get_item(lost.id).is_processed


def test_save_and_list_matches_by_confidence() -> None:
    store, lost, found = _store_with_pair()
    other = store.create_item(ItemType.FOUND, "Another watch", "Red watch", "images/other.jpg", "user3")

    saved = store.save_matches([_match(lost.id, other.id, 0.65), _match(lost.id, found.id, 0.91)])

    assert all(match.match_id and match.match_id.startswith("match_") for match in saved)
    assert all(match.created_at is not None for match in saved)
    assert [m.confidence_score for m in store.matches_for_item(lost.id)] == [0.91, 0.65]
    assert [m.found_item_id for m in store.matches_for_item(found.id)] == [found.id]
    assert store.get_match(saved[0].match_id) is saved[0]


def test_resolve_match_marks_both_items_matched() -> None:
    store, lost, found = _store_with_pair()
    (saved,) = store.save_matches([_match(lost.id, found.id, 0.8)])
    when = datetime(2024, 1, 16, 9, 0, tzinfo=timezone.utc)

    resolved = store.resolve_match(saved.match_id, when=when)

    assert resolved.status is MatchStatus.RESOLVED
    assert resolved.resolved_at == when
    for item_id in (lost.id, found.id):
        item = store.get_item(item_id)
        assert item.status is ItemStatus.MATCHED
        assert item.matched_at == when


def test_resolving_twice_is_rejected() -> None:
    store, lost, found = _store_with_pair()
    (saved,) = store.save_matches([_match(lost.id, found.id, 0.8)])
    store.resolve_match(saved.match_id)

    with pytest.raises(ValidationFailure):
        store.resolve_match(saved.match_id)
    with pytest.raises(ValidationFailure):
        store.resolve_match("match_unknown")


def test_match_rejects_self_pairing() -> None:
    with pytest.raises(ValidationFailure):
        _match("lost_1", "lost_1", 0.9)
    assert _match("lost_1", "found_1", 1.7).confidence_score == 1.0


def test_open_candidates_are_capped_to_the_newest_items() -> None:
    store = InMemoryItemStore()
    features = ImageFeatureSet(labels=(Label("watch", 0.9),))
    created = []
    for index in range(4):
        item = store.create_item(ItemType.FOUND, f"Watch {index}", "Found a watch", f"images/{index}.jpg", "user2")
        store.record_processing(item.id, features, NormalizedItem("watch", category="electronics"))
        created.append(item.id)

    capped = store.open_candidates(ItemType.FOUND, limit=2)

    assert [candidate.item.id for candidate in capped] == [created[3], created[2]]
    assert len(store.open_candidates(ItemType.FOUND)) == 4


def test_list_items_defaults_to_open_items_newest_first() -> None:
    store, lost, found = _store_with_pair()
    (saved,) = store.save_matches([_match(lost.id, found.id, 0.8)])
    fresh = store.create_item(ItemType.LOST, "Scarf", "Green scarf", "images/scarf.jpg", "user3")
    store.resolve_match(saved.match_id)

    assert store.list_items() == [fresh]
    assert store.list_items(ItemStatus.MATCHED, ItemType.FOUND) == [found]
    assert store.list_items(ItemStatus.MATCHED, limit=1) == [found]
    with pytest.raises(ValidationFailure):
        store.list_items(limit=0)
