from __future__ import annotations

from review_sentiment.settings import AppSettings, is_placeholder_url
from review_sentiment.sheets_delivery import SheetsDeliveryConfig


def test_default_webhook_is_placeholder(monkeypatch):
    monkeypatch.delenv("SHEETS_WEBHOOK_URL", raising=False)
    cfg = SheetsDeliveryConfig.from_settings(AppSettings())
    assert cfg.is_placeholder is True
    assert cfg.sheet_name == "SentimentAnalysis"
    assert cfg.source_tag == "Web App"


def test_configured_webhook_from_env(monkeypatch):
    monkeypatch.setenv("SHEETS_WEBHOOK_URL", " https://script.google.com/macros/s/AKfy123/exec ")
    monkeypatch.setenv("SHEETS_SHEET_NAME", "Reviews")
    cfg = SheetsDeliveryConfig.from_settings(AppSettings())
    assert cfg.endpoint_url == "https://script.google.com/macros/s/AKfy123/exec"
    assert cfg.sheet_name == "Reviews"
    assert cfg.is_placeholder is False


def test_is_placeholder_url():
    assert is_placeholder_url(None)
    assert is_placeholder_url("   ")
    assert is_placeholder_url("https://script.google.com/macros/s/YOUR_SCRIPT_ID/exec")
    assert not is_placeholder_url("https://example.com/hook")
