"""Lost/found item data model, image feature sets and normalized descriptions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from models.errors import ValidationFailure
from models.taxonomy import (
    normalise_features,
    normalize_category,
    normalize_color_name,
)


class ItemType(Enum):
    LOST = "lost"
    FOUND = "found"

    @property
    def opposite(self) -> "ItemType":
        return ItemType.FOUND if self is ItemType.LOST else ItemType.LOST


class ItemStatus(Enum):
    OPEN = "open"
    MATCHED = "matched"


def _ensure_list(value: Any) -> List[Any]:
    """Coerce a scalar or iterable into a list."""

    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _unit_interval(value: Any, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationFailure(f"{name} must be a number, got {value!r}") from exc
    if math.isnan(number) or not 0.0 <= number <= 1.0:
        raise ValidationFailure(f"{name} must lie in [0, 1], got {value!r}")
    return number


def _channel(value: Any, name: str) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError) as exc:
        raise ValidationFailure(f"{name} must be an integer, got {value!r}") from exc
    if not 0 <= number <= 255:
        raise ValidationFailure(f"{name} must lie in [0, 255], got {value!r}")
    return number


@dataclass(frozen=True)
class Label:
    description: str
    confidence: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "description", str(self.description))
        object.__setattr__(self, "confidence", _unit_interval(self.confidence, "label confidence"))


@dataclass(frozen=True)
class DetectedObject:
    name: str
    confidence: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", str(self.name))
        object.__setattr__(self, "confidence", _unit_interval(self.confidence, "object confidence"))


@dataclass(frozen=True)
class DominantColor:
    red: int
    green: int
    blue: int
    pixel_fraction: float = 0.0

    def __post_init__(self) -> None:
        for channel in ("red", "green", "blue"):
            object.__setattr__(self, channel, _channel(getattr(self, channel), channel))
        object.__setattr__(self, "pixel_fraction", _unit_interval(self.pixel_fraction, "pixel_fraction"))

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.red, self.green, self.blue)


@dataclass(frozen=True)
class ImageFeatureSet:
    """Labels, objects, dominant colors and embedded text detected in an image.

    Colors are kept ordered by descending pixel fraction so that the first entry
    is always the dominant color.
    """

    labels: Tuple[Label, ...] = ()
    objects: Tuple[DetectedObject, ...] = ()
    colors: Tuple[DominantColor, ...] = ()
    text: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "objects", tuple(self.objects))
        ordered = sorted(self.colors, key=lambda color: color.pixel_fraction, reverse=True)
        object.__setattr__(self, "colors", tuple(ordered))
        object.__setattr__(self, "text", self.text or "")

    @property
    def dominant_color(self) -> Optional[DominantColor]:
        return self.colors[0] if self.colors else None


@dataclass(frozen=True)
class NormalizedItem:
    """Standardised description, category and identifying features of an item."""

    description: str
    category: str = "other"
    features: Tuple[str, ...] = ()
    colors: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "description", str(self.description or ""))
        object.__setattr__(self, "category", normalize_category(self.category))
        object.__setattr__(self, "features", tuple(normalise_features(_ensure_list(self.features))))
        colors: List[str] = []
        for value in _ensure_list(self.colors):
            name = normalize_color_name(str(value))
            if name and name not in colors:
                colors.append(name)
        object.__setattr__(self, "colors", tuple(colors))

    @classmethod
    def fallback(cls, description: str) -> "NormalizedItem":
        """Safe default used whenever normalization is unavailable."""

        return cls(description=description, category="other", features=(), colors=())


@dataclass
class Item:
    """A single lost or found report."""

    id: str
    type: ItemType
    title: str
    description: str
    image_ref: str
    created_by: str
    status: ItemStatus = ItemStatus.OPEN
    created_at: Optional[datetime] = None
    image_features: Optional[ImageFeatureSet] = None
    normalized: Optional[NormalizedItem] = None
    processing_error: Optional[str] = None
    processed_at: Optional[datetime] = None
    matched_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not str(self.id or "").strip():
            raise ValidationFailure("Item id is required")
        try:
            self.type = ItemType(self.type)
            self.status = ItemStatus(self.status)
        except ValueError as exc:
            raise ValidationFailure(str(exc)) from exc

    @property
    def is_processed(self) -> bool:
        return self.image_features is not None and self.normalized is not None

    def to_dict(self) -> Dict[str, Any]:
        """Public view of the report; the reporter id is left out."""

        return {
            "id": self.id,
            "type": self.type.value,
            "status": self.status.value,
            "title": self.title,
            "description": self.description,
            "image_ref": self.image_ref,
            "category": self.normalized.category if self.normalized else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "matched_at": self.matched_at.isoformat() if self.matched_at else None,
        }


@dataclass(frozen=True)
class ProcessedItem:
    """An item bundled with the feature set and normalized form used for scoring."""

    item: Item
    image_features: ImageFeatureSet = field(default_factory=ImageFeatureSet)
    normalized: Optional[NormalizedItem] = None

    def __post_init__(self) -> None:
        if self.normalized is None:
            object.__setattr__(self, "normalized", NormalizedItem.fallback(self.item.description))

    @classmethod
    def from_item(cls, item: Item) -> "ProcessedItem":
        return cls(item=item, image_features=item.image_features or ImageFeatureSet(), normalized=item.normalized)


def image_features_from_raw(payload: Dict[str, Any]) -> ImageFeatureSet:
    """Build an :class:`ImageFeatureSet` from loose stored metadata.

    Accepts both ``pixel_fraction`` and ``pixelFraction`` spellings as stored by
    earlier item records.
    """

    labels = [
        Label(description=raw.get("description", ""), confidence=raw.get("confidence", 0.0))
        for raw in _ensure_list(payload.get("labels"))
    ]
    objects = [
        DetectedObject(name=raw.get("name", ""), confidence=raw.get("confidence", 0.0))
        for raw in _ensure_list(payload.get("objects"))
    ]
    colors = [
        DominantColor(
            red=raw.get("red", 0),
            green=raw.get("green", 0),
            blue=raw.get("blue", 0),
            pixel_fraction=raw.get("pixel_fraction", raw.get("pixelFraction", 0.0)) or 0.0,
        )
        for raw in _ensure_list(payload.get("colors"))
    ]
    return ImageFeatureSet(labels=tuple(labels), objects=tuple(objects), colors=tuple(colors), text=payload.get("text", ""))


__all__ = [
    "ItemType",
    "ItemStatus",
    "Label",
    "DetectedObject",
    "DominantColor",
    "ImageFeatureSet",
    "NormalizedItem",
    "Item",
    "ProcessedItem",
    "image_features_from_raw",
]
