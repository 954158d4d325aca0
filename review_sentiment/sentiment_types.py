from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal


SentimentCategory = Literal["positive", "negative", "neutral"]


@dataclass(frozen=True)
class SentimentRecord:
    """
    Canonical top prediction.

    - label: uppercased model label (e.g. POSITIVE, 5 STARS, LABEL_1)
    - score: model confidence, passed through as reported
    """

    label: str
    score: float


@dataclass(frozen=True)
class BucketedSentiment:
    category: SentimentCategory
    label: str  # may be rewritten by the numeric fallback
    score: float


@dataclass(frozen=True)
class Presentation:
    icon_key: str
    confidence_percent: str  # 1 decimal place, e.g. "82.3"
    score_display: str  # 4 decimal places
    explanation: str


@dataclass(frozen=True)
class AnalysisResult:
    review_text: str
    category: SentimentCategory
    label: str
    score: float
    presentation: Presentation

    def to_dict(self) -> dict[str, Any]:
        return {
            "review": self.review_text,
            "sentiment": self.category,
            "label": self.label,
            "score": self.score,
            **asdict(self.presentation),
        }


@dataclass(frozen=True)
class AnalysisEvent:
    """One row for the spreadsheet log. Lives only for a delivery attempt."""

    timestamp: str  # ISO8601 UTC
    review_text: str  # already cut to the body limit
    sentiment: SentimentCategory
    label: str
    score: float
    confidence_percent: str
    source: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "review": self.review_text,
            "sentiment": self.sentiment,
            "label": self.label,
            "score": round(self.score, 4),
            "confidence": self.confidence_percent,
            "source": self.source,
        }
