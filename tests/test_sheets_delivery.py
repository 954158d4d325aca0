from __future__ import annotations

import asyncio
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from review_sentiment.errors import DeliveryError
from review_sentiment.sentiment_types import AnalysisEvent
from review_sentiment.sheets_delivery import (
    DeliveryPipeline,
    SheetsDeliveryConfig,
    build_append_payload,
    build_append_url,
)

ENDPOINT = "https://script.google.com/macros/s/abc123/exec"


class _RecordingTransport:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple] = []

    def __call__(self, *args):
        self.calls.append(args)
        if self.fail:
            raise requests.ConnectionError("boom")


def _event(review: str = "Great product", score: float = 0.913) -> AnalysisEvent:
    return AnalysisEvent(
        timestamp="2026-01-28T13:28:48+00:00",
        review_text=review,
        sentiment="positive",
        label="POSITIVE",
        score=score,
        confidence_percent="91.3",
        source="Web App",
    )


def _pipeline(primary: _RecordingTransport, secondary: _RecordingTransport, url: str = ENDPOINT):
    return DeliveryPipeline(SheetsDeliveryConfig(endpoint_url=url), primary=primary, secondary=secondary)


def test_placeholder_url_disables_delivery():
    primary, secondary = _RecordingTransport(), _RecordingTransport()
    p = _pipeline(primary, secondary, url="https://script.google.com/macros/s/YOUR_SCRIPT_ID/exec")
    assert p.enabled is False

    outcome = asyncio.run(p.deliver(_event()))
    assert outcome.delivered is False
    assert outcome.transport is None
    assert primary.calls == [] and secondary.calls == []


def test_disabled_by_toggle_makes_no_calls():
    primary, secondary = _RecordingTransport(), _RecordingTransport()
    p = _pipeline(primary, secondary)
    assert p.enabled is True
    p.toggle(False)

    asyncio.run(p.deliver(_event()))
    assert len(primary.calls) + len(secondary.calls) == 0


def test_toggle_can_enable_placeholder_session():
    p = _pipeline(_RecordingTransport(), _RecordingTransport(), url="")
    assert p.enabled is False
    assert p.toggle(True) is True
    assert p.enabled is True


def test_primary_success_skips_secondary():
    primary, secondary = _RecordingTransport(), _RecordingTransport()
    outcome = asyncio.run(_pipeline(primary, secondary).deliver(_event()))

    assert outcome.delivered is True
    assert outcome.transport == "primary"
    assert secondary.calls == []
    url, payload = primary.calls[0]
    assert url == ENDPOINT
    assert payload["action"] == "append"
    assert payload["sheet"] == "SentimentAnalysis"
    assert payload["data"]["sentiment"] == "positive"
    assert payload["data"]["confidence"] == "91.3"


def test_primary_failure_falls_back_to_secondary():
    primary, secondary = _RecordingTransport(fail=True), _RecordingTransport()
    outcome = asyncio.run(_pipeline(primary, secondary).deliver(_event()))

    assert outcome.delivered is True
    assert outcome.transport == "secondary"
    assert len(primary.calls) == 1
    assert len(secondary.calls) == 1


def test_both_transports_failing_raises_delivery_error():
    primary, secondary = _RecordingTransport(fail=True), _RecordingTransport(fail=True)
    with pytest.raises(DeliveryError):
        asyncio.run(_pipeline(primary, secondary).deliver(_event()))
    assert len(secondary.calls) == 1


def test_body_review_is_cut_to_500_chars():
    payload = build_append_payload(_event(review="x" * 800), "Sheet1")
    assert len(payload["data"]["review"]) == 500
    assert payload["sheet"] == "Sheet1"


def test_query_url_carries_row_and_cuts_review():
    url = build_append_url(ENDPOINT, _event(review="good & cheap " * 40))
    parsed = urlparse(url)
    qs = parse_qs(parsed.query)

    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == ENDPOINT
    assert qs["action"] == ["append"]
    assert qs["sentiment"] == ["positive"]
    assert qs["label"] == ["POSITIVE"]
    assert qs["score"] == ["0.9130"]
    assert qs["confidence"] == ["91.3"]
    assert qs["source"] == ["Web App"]
    assert len(qs["review"][0]) <= 200
    assert " " not in parsed.query and "&cheap" not in parsed.query


def test_query_url_appends_to_existing_query():
    url = build_append_url(ENDPOINT + "?v=2", _event())
    assert url.startswith(ENDPOINT + "?v=2&action=append")
