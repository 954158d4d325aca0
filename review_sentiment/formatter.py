from __future__ import annotations

import math

from review_sentiment.sentiment_types import BucketedSentiment, Presentation, SentimentCategory

HIGH_CONFIDENCE_ABOVE = 80.0

ICON_KEYS: dict[SentimentCategory, str] = {
    "positive": "fa-smile",
    "negative": "fa-frown",
    "neutral": "fa-meh",
}

# (high confidence, moderate confidence)
EXPLANATIONS: dict[SentimentCategory, tuple[str, str]] = {
    "positive": (
        "This review expresses strong positive sentiment. The customer is very satisfied.",
        "This review shows positive sentiment with moderate confidence.",
    ),
    "negative": (
        "This review expresses strong negative sentiment. Immediate attention may be needed.",
        "This review shows negative sentiment with moderate confidence.",
    ),
    "neutral": (
        "This review shows neutral or mixed sentiment. "
        "The customer may have both positive and negative points.",
        "This review leans neutral, but the model is unsure. It may be worth a manual read.",
    ),
}


def clamp_score(score: float) -> float:
    """Finite score in [0, 1]; NaN/inf become 0."""
    if not math.isfinite(score):
        return 0.0
    return min(max(score, 0.0), 1.0)


def confidence_percent(score: float) -> str:
    return f"{clamp_score(score) * 100:.1f}"


def explanation_for(category: SentimentCategory, confidence: str) -> str:
    high, moderate = EXPLANATIONS[category]
    return high if float(confidence) > HIGH_CONFIDENCE_ABOVE else moderate


def present(bucketed: BucketedSentiment) -> Presentation:
    confidence = confidence_percent(bucketed.score)
    return Presentation(
        icon_key=ICON_KEYS[bucketed.category],
        confidence_percent=confidence,
        score_display=f"{clamp_score(bucketed.score):.4f}",
        explanation=explanation_for(bucketed.category, confidence),
    )
