from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Sequence

from review_sentiment.classifier import bucket
from review_sentiment.errors import (
    AnalyzerBusyError,
    DeliveryError,
    EmptyReviewError,
    ModelNotReadyError,
    ReviewSentimentError,
)
from review_sentiment.formatter import present
from review_sentiment.normalizer import normalize_output
from review_sentiment.sentiment_types import AnalysisEvent, AnalysisResult
from review_sentiment.sheets_delivery import BODY_REVIEW_MAX_CHARS, DeliveryPipeline

logger = logging.getLogger(__name__)

ClassifyFn = Callable[[str], Awaitable[Any]]


@dataclass(frozen=True)
class CorpusFailure:
    index: int
    review_text: str
    message: str


@dataclass(frozen=True)
class CorpusAnalysis:
    results: list[AnalysisResult] = field(default_factory=list)
    failures: list[CorpusFailure] = field(default_factory=list)


def build_event(result: AnalysisResult, source: str) -> AnalysisEvent:
    return AnalysisEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        review_text=result.review_text[:BODY_REVIEW_MAX_CHARS],
        sentiment=result.category,
        label=result.label,
        score=result.score,
        confidence_percent=result.presentation.confidence_percent,
        source=source,
    )


class AnalysisSession:
    """
    Per-process analysis context: model handle, delivery pipeline, busy flag
    and the last displayed result.

    One analysis at a time. The result is returned as soon as it is
    formatted; the sheet log is a detached task that is never awaited by
    the caller (see drain_deliveries for shutdown/tests).
    """

    def __init__(self, delivery: DeliveryPipeline, classify: Optional[ClassifyFn] = None):
        self.delivery = delivery
        self._classify = classify
        self._busy = False
        self._pending: set[asyncio.Task] = set()
        self.last_result: Optional[AnalysisResult] = None
        self.corpus: list[str] = []

    @property
    def model_ready(self) -> bool:
        return self._classify is not None

    @property
    def busy(self) -> bool:
        return self._busy

    def attach_model(self, classify: ClassifyFn) -> None:
        self._classify = classify

    def reset(self) -> None:
        self.last_result = None

    def replace_corpus(self, texts: Sequence[str]) -> None:
        self.corpus = list(texts)

    async def analyze(self, text: str) -> AnalysisResult:
        """
        Analyze one review and schedule its sheet log.

        Raises:
            EmptyReviewError: blank input
            ModelNotReadyError: no model attached yet
            AnalyzerBusyError: another analysis is running
            InferenceError / InvalidOutputError: model call or output problems
        """
        review = self._validate(text)
        self._acquire()
        try:
            self.last_result = None
            result = await self._analyze_one(review)
            self.last_result = result
        finally:
            self._busy = False

        self._schedule_delivery(result)
        return result

    async def analyze_corpus(self, texts: Optional[Sequence[str]] = None) -> CorpusAnalysis:
        """
        Analyze reviews one by one (defaults to the loaded corpus).

        Per-review failures are collected, not raised.
        """
        items = list(self.corpus if texts is None else texts)
        if self._classify is None:
            raise ModelNotReadyError()
        self._acquire()

        out = CorpusAnalysis()
        try:
            for i, text in enumerate(items):
                try:
                    result = await self._analyze_one(self._validate(text))
                except ReviewSentimentError as e:
                    logger.warning("Corpus item failed: index=%s err=%s", i, e)
                    out.failures.append(CorpusFailure(index=i, review_text=text, message=e.user_message))
                    continue
                out.results.append(result)
                self._schedule_delivery(result)
        finally:
            self._busy = False

        logger.info("Corpus analyzed: ok=%s failed=%s", len(out.results), len(out.failures))
        return out

    async def drain_deliveries(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _validate(self, text: str) -> str:
        review = (text or "").strip()
        if not review:
            raise EmptyReviewError()
        if self._classify is None:
            raise ModelNotReadyError()
        return review

    def _acquire(self) -> None:
        if self._busy:
            raise AnalyzerBusyError()
        self._busy = True

    async def _analyze_one(self, review: str) -> AnalysisResult:
        raw = await self._classify(review)
        record = normalize_output(raw)
        bucketed = bucket(record)
        result = AnalysisResult(
            review_text=review,
            category=bucketed.category,
            label=bucketed.label,
            score=bucketed.score,
            presentation=present(bucketed),
        )
        logger.info(
            "Sentiment: %s, Label: %s, Confidence: %s%%",
            result.category,
            result.label,
            result.presentation.confidence_percent,
        )
        return result

    def _schedule_delivery(self, result: AnalysisResult) -> None:
        if not self.delivery.enabled:
            return
        event = build_event(result, self.delivery.cfg.source_tag)
        task = asyncio.create_task(self._deliver(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, event: AnalysisEvent) -> None:
        try:
            outcome = await self.delivery.deliver(event)
        except DeliveryError as e:
            logger.warning("Sheet save failed: %s", e)
            return
        if outcome.delivered:
            logger.info("Data saved to sheet: transport=%s", outcome.transport)
