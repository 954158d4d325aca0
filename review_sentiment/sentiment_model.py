from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

import torch
from transformers import pipeline

from review_sentiment.errors import InferenceError, ModelLoadError
from review_sentiment.settings import AppSettings

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "..."


@dataclass(frozen=True)
class SentimentModelConfig:
    model_id: str
    token: Optional[str]
    device: str  # "auto" | "cpu" | "cuda"
    max_input_chars: int = 1000

    @staticmethod
    def from_settings(s: AppSettings) -> "SentimentModelConfig":
        return SentimentModelConfig(
            model_id=s.sentiment_model_id,
            token=s.hf_token or None,
            device=s.sentiment_device,
            max_input_chars=s.sentiment_max_input_chars,
        )


def _select_device(device: str) -> torch.device:
    if device == "cpu":
        return torch.device("cpu")
    if device == "cuda":
        return torch.device("cuda")
    # auto
    return torch.device("cuda" if torch.cuda.is_available() else "cpu")


@lru_cache(maxsize=2)
def _load_pipeline(model_id: str, token: Optional[str], device: str):
    """
    Load once per process. Cached by (model_id, token, device).

    Raises:
        OSError / ValueError: if the model id is unknown or access is denied.
    """
    logger.info("Loading sentiment model: model=%s with_token=%s", model_id, token is not None)
    return pipeline(
        "sentiment-analysis",
        model=model_id,
        token=token,
        device=_select_device(device),
    )


def truncate_for_model(text: str, max_chars: int) -> str:
    if len(text) > max_chars:
        return text[:max_chars] + TRUNCATION_MARKER
    return text


class SentimentModel:
    """
    Async wrapper around a transformers sentiment-analysis pipeline:
    - pipeline loads once (process cache)
    - one retry without the credential if the credentialed load fails
    - inference runs in a worker thread so the event loop stays free

    Output is returned exactly as the pipeline produced it; shape checks
    happen in the normalizer.
    """

    def __init__(self, cfg: SentimentModelConfig, classifier: Any):
        self._cfg = cfg
        self._classifier = classifier

    @classmethod
    def load(cls, cfg: SentimentModelConfig) -> "SentimentModel":
        """
        Raises:
            ModelLoadError: load failed (after the token-less retry, if a token was set)
        """
        try:
            classifier = _load_pipeline(cfg.model_id, cfg.token, cfg.device)
        except Exception as e:
            if cfg.token is None:
                logger.error("Failed to load model: model=%s err=%s", cfg.model_id, e)
                raise ModelLoadError(f"Failed to load model {cfg.model_id}: {e}") from e
            logger.warning("Model load with token failed, retrying without token: err=%s", e)
            try:
                classifier = _load_pipeline(cfg.model_id, None, cfg.device)
            except Exception as retry_exc:
                logger.error("Failed to load model: model=%s err=%s", cfg.model_id, retry_exc)
                raise ModelLoadError(f"Failed to load model {cfg.model_id}: {retry_exc}") from retry_exc

        logger.info("Sentiment model ready: model=%s device=%s", cfg.model_id, cfg.device)
        return cls(cfg, classifier)

    @classmethod
    async def load_async(cls, cfg: SentimentModelConfig) -> "SentimentModel":
        return await asyncio.to_thread(cls.load, cfg)

    @property
    def model_id(self) -> str:
        return self._cfg.model_id

    async def classify(self, text: str) -> Any:
        """
        Run the pipeline on one review.

        Raises:
            InferenceError: the pipeline raised
        """
        prepared = truncate_for_model(text, self._cfg.max_input_chars)
        try:
            return await asyncio.to_thread(self._classifier, prepared)
        except Exception as e:
            logger.error("Model inference error: err=%s", e)
            raise InferenceError("Analysis failed. Please try again.") from e
