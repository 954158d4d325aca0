from __future__ import annotations

from review_sentiment.sentiment_types import BucketedSentiment, SentimentCategory, SentimentRecord

LABEL_MATCH_THRESHOLD = 0.5
FALLBACK_POSITIVE_ABOVE = 0.66
FALLBACK_NEGATIVE_BELOW = 0.34

# Order matters: first substring hit wins
_LABEL_KEYWORDS: tuple[tuple[str, SentimentCategory], ...] = (
    ("POSITIVE", "positive"),
    ("NEGATIVE", "negative"),
    ("NEUTRAL", "neutral"),
)


def bucket(record: SentimentRecord) -> BucketedSentiment:
    """
    Map (label, score) to positive/negative/neutral.

    Rules:
    - label contains POSITIVE/NEGATIVE/NEUTRAL and score > 0.5 -> that category,
      label kept as-is
    - otherwise numeric fallback on score: > 0.66 positive, < 0.34 negative,
      else neutral; label rewritten to the category name

    Label is expected uppercased already (see normalizer).
    """
    score = record.score
    if score > LABEL_MATCH_THRESHOLD:
        for keyword, category in _LABEL_KEYWORDS:
            if keyword in record.label:
                return BucketedSentiment(category=category, label=record.label, score=score)

    category = _fallback_category(score)
    return BucketedSentiment(category=category, label=category.upper(), score=score)


def _fallback_category(score: float) -> SentimentCategory:
    if score > FALLBACK_POSITIVE_ABOVE:
        return "positive"
    if score < FALLBACK_NEGATIVE_BELOW:
        return "negative"
    # also covers NaN
    return "neutral"
