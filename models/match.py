"""Match records and similarity breakdowns."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from models.errors import ValidationFailure


def clamp01(value: Any) -> float:
    """Clamp a probability-like value to [0, 1]; NaN and junk collapse to 0."""

    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return max(0.0, min(1.0, number))


class MatchStatus(Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class SimilarityBreakdown:
    image_similarity: float = 0.0
    text_similarity: float = 0.0
    metadata_similarity: float = 0.0

    def __post_init__(self) -> None:
        for name in ("image_similarity", "text_similarity", "metadata_similarity"):
            object.__setattr__(self, name, clamp01(getattr(self, name)))

    def as_dict(self) -> Dict[str, float]:
        return {
            "image_similarity": self.image_similarity,
            "text_similarity": self.text_similarity,
            "metadata_similarity": self.metadata_similarity,
        }


@dataclass(frozen=True)
class MatchScore:
    """Outcome of scoring one lost/found pair."""

    confidence_score: float
    explanation: str
    breakdown: SimilarityBreakdown
    passed: bool = False


@dataclass
class Match:
    """A proposed pairing between one lost and one found item."""

    lost_item_id: str
    found_item_id: str
    confidence_score: float
    breakdown: SimilarityBreakdown
    explanation: str = ""
    status: MatchStatus = MatchStatus.PENDING
    created_at: Optional[datetime] = None
    match_id: Optional[str] = None
    resolved_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.lost_item_id or not self.found_item_id:
            raise ValidationFailure("A match needs both a lost and a found item id")
        if self.lost_item_id == self.found_item_id:
            raise ValidationFailure("A match cannot pair an item with itself")
        self.confidence_score = clamp01(self.confidence_score)
        self.status = MatchStatus(self.status)

    @property
    def pair(self) -> tuple[str, str]:
        return (self.lost_item_id, self.found_item_id)

    def involves(self, item_id: str) -> bool:
        return item_id in self.pair

    def resolve(self, when: datetime | None = None) -> None:
        """Confirm the match; ``pending -> resolved`` is the only transition."""

        if self.status is not MatchStatus.PENDING:
            raise ValidationFailure(f"Match {self.match_id or self.pair} is already {self.status.value}")
        self.status = MatchStatus.RESOLVED
        self.resolved_at = when or datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match_id": self.match_id,
            "lost_item_id": self.lost_item_id,
            "found_item_id": self.found_item_id,
            "confidence_score": self.confidence_score,
            "explanation": self.explanation,
            "breakdown": self.breakdown.as_dict(),
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
        }


__all__ = ["clamp01", "MatchStatus", "SimilarityBreakdown", "MatchScore", "Match"]
