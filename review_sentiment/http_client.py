from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpConfig:
    timeout_sec: float
    user_agent: str


class HttpClient:
    """
    Thin HTTP client wrapper for webhook calls:
    - Timeout
    - One shot per call (fallback policy lives in the caller)
    - Non-2xx raises

    Response bodies are never read; the webhook is treated as write-only.
    """

    def __init__(self, config: HttpConfig, session: Optional[requests.Session] = None):
        self._cfg = config
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self._cfg.user_agent})

    def post_json(self, url: str, payload: Mapping[str, Any]) -> None:
        """
        POST a JSON body.

        Raises:
            requests.HTTPError: non-2xx response
            requests.RequestException: network errors
        """
        resp = self._session.post(url, json=dict(payload), timeout=self._cfg.timeout_sec)
        resp.raise_for_status()
        logger.debug("HTTP POST ok: url=%s status=%s", url, resp.status_code)

    def get(self, url: str) -> None:
        """
        GET a fully-built URL (query string already encoded).

        Raises:
            requests.HTTPError: non-2xx response
            requests.RequestException: network errors
        """
        resp = self._session.get(url, timeout=self._cfg.timeout_sec)
        resp.raise_for_status()
        logger.debug("HTTP GET ok: status=%s", resp.status_code)

    def close(self) -> None:
        self._session.close()
