"""FastAPI app serving the review sentiment demo to the browser."""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from review_sentiment.analyzer import AnalysisSession
from review_sentiment.batch_ingest import load_corpus
from review_sentiment.errors import (
    AnalyzerBusyError,
    EmptyReviewError,
    InferenceError,
    InvalidOutputError,
    ModelLoadError,
    ModelNotReadyError,
    ParseError,
)
from review_sentiment.sentiment_model import SentimentModel, SentimentModelConfig
from review_sentiment.settings import load_settings
from review_sentiment.sheets_delivery import DeliveryPipeline, SheetsDeliveryConfig

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

EXAMPLE_REVIEWS = [
    "This product is amazing! It exceeded all my expectations and the customer service was excellent.",
    "Terrible experience. The item arrived broken and nobody answered my emails.",
    "It's okay. Does the job, but nothing special for the price.",
]

_ERROR_STATUS = {
    EmptyReviewError: status.HTTP_400_BAD_REQUEST,
    AnalyzerBusyError: status.HTTP_409_CONFLICT,
    ModelNotReadyError: status.HTTP_503_SERVICE_UNAVAILABLE,
    ModelLoadError: status.HTTP_503_SERVICE_UNAVAILABLE,
    InferenceError: status.HTTP_502_BAD_GATEWAY,
    InvalidOutputError: status.HTTP_502_BAD_GATEWAY,
}


class AnalyzeRequest(BaseModel):
    text: str


class DeliveryToggle(BaseModel):
    enabled: bool


async def _load_model_into(app: FastAPI, session: AnalysisSession, cfg: SentimentModelConfig) -> None:
    try:
        model = await SentimentModel.load_async(cfg)
    except ModelLoadError as e:
        app.state.model_error = e.user_message
        return
    session.attach_model(model.classify)
    logger.info("Analyzer ready: model=%s", model.model_id)


def create_app(session: Optional[AnalysisSession] = None, load_model: bool = True) -> FastAPI:
    """
    Build the app. Without an explicit session one is created at startup
    from environment settings and the model loads in the background.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        s = load_settings()
        app.state.settings_text_column = s.batch_text_column
        app.state.model_error = None
        current = session
        if current is None:
            current = AnalysisSession(DeliveryPipeline(SheetsDeliveryConfig.from_settings(s)))
        app.state.session = current

        loader = None
        if load_model and not current.model_ready:
            loader = asyncio.create_task(
                _load_model_into(app, current, SentimentModelConfig.from_settings(s))
            )
        try:
            yield
        finally:
            if loader is not None and not loader.done():
                loader.cancel()
            await current.drain_deliveries()
            current.delivery.close()

    app = FastAPI(title="Review Sentiment", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _session(request: Request) -> AnalysisSession:
        return request.app.state.session

    @app.get("/health")
    def health(request: Request) -> Dict[str, Any]:
        sess = _session(request)
        return {
            "status": "ok",
            "model_ready": sess.model_ready,
            "model_error": request.app.state.model_error,
            "delivery_enabled": sess.delivery.enabled,
        }

    @app.get("/examples")
    def examples() -> Dict[str, Any]:
        return {"examples": EXAMPLE_REVIEWS}

    @app.post("/analyze")
    async def analyze(request: Request, body: AnalyzeRequest) -> Dict[str, Any]:
        sess = _session(request)
        if request.app.state.model_error and not sess.model_ready:
            raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail=request.app.state.model_error)
        try:
            result = await sess.analyze(body.text)
        except tuple(_ERROR_STATUS) as e:
            code = next(c for cls, c in _ERROR_STATUS.items() if isinstance(e, cls))
            raise HTTPException(code, detail=e.user_message) from e
        return result.to_dict()

    @app.get("/result")
    def last_result(request: Request) -> Dict[str, Any]:
        result = _session(request).last_result
        if result is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="No result yet.")
        return result.to_dict()

    @app.post("/reset")
    def reset(request: Request) -> Dict[str, Any]:
        _session(request).reset()
        return {"status": "ok"}

    @app.post("/delivery")
    def toggle_delivery(request: Request, body: DeliveryToggle) -> Dict[str, Any]:
        enabled = _session(request).delivery.toggle(body.enabled)
        return {"delivery_enabled": enabled}

    @app.post("/corpus")
    async def upload_corpus(request: Request, column: Optional[str] = Query(None)) -> Dict[str, Any]:
        """Raw TSV in the request body; replaces the current corpus."""
        sess = _session(request)
        content = (await request.body()).decode("utf-8", errors="replace")
        column = column or request.app.state.settings_text_column
        try:
            texts = load_corpus(content, column)
        except ParseError as e:
            sess.replace_corpus([])
            raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=f"{e.user_message} ({e})") from e
        sess.replace_corpus(texts)
        return {"count": len(texts), "column": column}

    @app.get("/corpus")
    def get_corpus(request: Request) -> Dict[str, Any]:
        corpus = _session(request).corpus
        return {"count": len(corpus), "reviews": corpus}

    @app.post("/corpus/analyze")
    async def analyze_corpus(request: Request) -> Dict[str, Any]:
        sess = _session(request)
        try:
            outcome = await sess.analyze_corpus()
        except (ModelNotReadyError, AnalyzerBusyError) as e:
            code = _ERROR_STATUS[type(e)]
            raise HTTPException(code, detail=e.user_message) from e
        return {
            "results": [r.to_dict() for r in outcome.results],
            "failures": [
                {"index": f.index, "review": f.review_text, "message": f.message}
                for f in outcome.failures
            ],
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "review_sentiment.server:app",
        host=os.getenv("REVIEW_SENTIMENT_HOST", "127.0.0.1"),
        port=int(os.getenv("REVIEW_SENTIMENT_PORT", "8000")),
    )
