from __future__ import annotations

from review_sentiment.classifier import bucket
from review_sentiment.formatter import EXPLANATIONS, confidence_percent, present
from review_sentiment.sentiment_types import BucketedSentiment, SentimentRecord


def test_confidence_percent_one_decimal():
    assert confidence_percent(0.8234) == "82.3"


def test_confidence_percent_is_clamped():
    assert confidence_percent(1.2) == "100.0"
    assert confidence_percent(-0.5) == "0.0"
    assert confidence_percent(float("inf")) == "0.0"
    assert confidence_percent(float("nan")) == "0.0"


def test_negative_record_through_bucket_and_present():
    b = bucket(SentimentRecord(label="NEGATIVE", score=0.913))
    p = present(b)
    assert b.category == "negative"
    assert p.icon_key == "fa-frown"
    assert p.confidence_percent == "91.3"
    assert p.score_display == "0.9130"
    assert p.explanation == EXPLANATIONS["negative"][0]


def test_exactly_eighty_is_moderate():
    p = present(BucketedSentiment(category="positive", label="POSITIVE", score=0.8))
    assert p.confidence_percent == "80.0"
    assert p.explanation == EXPLANATIONS["positive"][1]


def test_each_category_has_its_own_icon_and_templates():
    icons = {present(BucketedSentiment(category=c, label=c.upper(), score=0.9)).icon_key for c in EXPLANATIONS}
    assert icons == {"fa-smile", "fa-frown", "fa-meh"}
    templates = {t for pair in EXPLANATIONS.values() for t in pair}
    assert len(templates) == 6
