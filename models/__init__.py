"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.errors import *  # noqa: F401,F403
from models.item import (
    DetectedObject,
    DominantColor,
    ImageFeatureSet,
    Item,
    ItemStatus,
    ItemType,
    Label,
    NormalizedItem,
    ProcessedItem,
    image_features_from_raw,
)
from models.match import Match, MatchScore, MatchStatus, SimilarityBreakdown, clamp01

__all__ = [
    "DetectedObject",
    "DominantColor",
    "ImageFeatureSet",
    "Item",
    "ItemStatus",
    "ItemType",
    "Label",
    "NormalizedItem",
    "ProcessedItem",
    "image_features_from_raw",
    "Match",
    "MatchScore",
    "MatchStatus",
    "SimilarityBreakdown",
    "clamp01",
]
