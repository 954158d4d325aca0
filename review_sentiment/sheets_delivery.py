from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal, Mapping, Optional
from urllib.parse import urlencode

from review_sentiment.errors import DeliveryError
from review_sentiment.http_client import HttpClient, HttpConfig
from review_sentiment.sentiment_types import AnalysisEvent
from review_sentiment.settings import AppSettings, is_placeholder_url

logger = logging.getLogger(__name__)

BODY_REVIEW_MAX_CHARS = 500
QUERY_REVIEW_MAX_CHARS = 200

PrimaryTransport = Callable[[str, Mapping[str, Any]], None]
SecondaryTransport = Callable[[str], None]
TransportName = Literal["primary", "secondary"]


@dataclass(frozen=True)
class SheetsDeliveryConfig:
    """
    Spreadsheet webhook configuration (Google Apps Script web app or similar).

    Environment variables:
      - SHEETS_WEBHOOK_URL: deployed script URL; the default placeholder disables delivery
      - SHEETS_SHEET_NAME: target sheet (default: "SentimentAnalysis")
      - SHEETS_SOURCE_TAG: value of the "source" column (default: "Web App")
      - SHEETS_REQUEST_TIMEOUT_SEC: per-request timeout (default: 10)
    """

    endpoint_url: str
    sheet_name: str = "SentimentAnalysis"
    source_tag: str = "Web App"
    timeout_sec: float = 10.0
    user_agent: str = "review-sentiment/0.1"

    @property
    def is_placeholder(self) -> bool:
        return is_placeholder_url(self.endpoint_url)

    @staticmethod
    def from_settings(s: AppSettings) -> "SheetsDeliveryConfig":
        return SheetsDeliveryConfig(
            endpoint_url=s.sheets_webhook_url.strip(),
            sheet_name=s.sheets_sheet_name,
            source_tag=s.sheets_source_tag,
            timeout_sec=s.sheets_request_timeout_sec,
            user_agent=s.sheets_user_agent,
        )


@dataclass(frozen=True)
class DeliveryOutcome:
    delivered: bool
    transport: Optional[TransportName] = None


def build_append_payload(event: AnalysisEvent, sheet_name: str) -> dict[str, Any]:
    data = event.to_payload()
    data["review"] = event.review_text[:BODY_REVIEW_MAX_CHARS]
    return {"action": "append", "sheet": sheet_name, "data": data}


def build_append_url(endpoint_url: str, event: AnalysisEvent) -> str:
    params = {
        "action": "append",
        "timestamp": event.timestamp,
        "review": event.review_text[:QUERY_REVIEW_MAX_CHARS],
        "sentiment": event.sentiment,
        "label": event.label,
        "score": f"{event.score:.4f}",
        "confidence": event.confidence_percent,
        "source": event.source,
    }
    sep = "&" if "?" in endpoint_url else "?"
    return f"{endpoint_url}{sep}{urlencode(params)}"


class DeliveryPipeline:
    """
    Best-effort append of analysis events to a spreadsheet webhook.

    - Primary: POST JSON body {action, sheet, data}
    - Secondary (only if primary raised): GET with the row in the query string
    - Both failed: DeliveryError. Callers log it and move on.

    Transports are plain callables so they can be swapped in tests; the
    default ones go through HttpClient and run in a worker thread.
    """

    def __init__(
            self,
            cfg: SheetsDeliveryConfig,
            primary: Optional[PrimaryTransport] = None,
            secondary: Optional[SecondaryTransport] = None,
    ):
        self.cfg = cfg
        self._http: Optional[HttpClient] = None
        if primary is None or secondary is None:
            self._http = HttpClient(HttpConfig(timeout_sec=cfg.timeout_sec, user_agent=cfg.user_agent))
        self._primary = primary or self._http.post_json
        self._secondary = secondary or self._http.get

        self._enabled = not cfg.is_placeholder
        if self._enabled:
            logger.info("Sheet logging enabled: sheet=%s", cfg.sheet_name)
        else:
            logger.warning("Sheet logging is not configured. Set SHEETS_WEBHOOK_URL to enable it.")

    @property
    def enabled(self) -> bool:
        return self._enabled

    def toggle(self, enable: bool) -> bool:
        self._enabled = bool(enable)
        logger.info("Sheet logging: %s", "ENABLED" if self._enabled else "DISABLED")
        return self._enabled

    async def deliver(self, event: AnalysisEvent) -> DeliveryOutcome:
        """
        Append one event.

        Returns:
            DeliveryOutcome(delivered=False) without any call when disabled,
            otherwise which transport succeeded.

        Raises:
            DeliveryError: both transports failed
        """
        if not self._enabled:
            logger.debug("Sheet logging disabled; skipping delivery.")
            return DeliveryOutcome(delivered=False)

        payload = build_append_payload(event, self.cfg.sheet_name)
        try:
            await asyncio.to_thread(self._primary, self.cfg.endpoint_url, payload)
            logger.info("Row sent via POST: sheet=%s", self.cfg.sheet_name)
            return DeliveryOutcome(delivered=True, transport="primary")
        except Exception as e:
            logger.warning("POST delivery failed, trying GET: err=%s", e)

        url = build_append_url(self.cfg.endpoint_url, event)
        try:
            await asyncio.to_thread(self._secondary, url)
        except Exception as e:
            logger.error("GET delivery also failed: err=%s", e)
            raise DeliveryError("Failed to save to Google Sheets") from e

        logger.info("Row sent via GET: sheet=%s", self.cfg.sheet_name)
        return DeliveryOutcome(delivered=True, transport="secondary")

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
