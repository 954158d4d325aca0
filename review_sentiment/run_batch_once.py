from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections import Counter

from review_sentiment.analyzer import AnalysisSession
from review_sentiment.batch_ingest import load_corpus_file
from review_sentiment.errors import ReviewSentimentError
from review_sentiment.sentiment_model import SentimentModel, SentimentModelConfig
from review_sentiment.settings import load_settings
from review_sentiment.sheets_delivery import DeliveryPipeline, SheetsDeliveryConfig

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def _run(path: str, column: str, limit: int | None) -> None:
    s = load_settings()

    try:
        corpus = load_corpus_file(path, column)
    except ReviewSentimentError as e:
        logger.error("Could not load corpus: path=%s err=%s", path, e)
        print(json.dumps({"error": e.user_message}, ensure_ascii=False))
        return

    if limit is not None:
        corpus = corpus[:limit]
    logger.info("Corpus loaded: reviews=%s column=%s", len(corpus), column)
    if not corpus:
        print("[]")
        return

    delivery = DeliveryPipeline(SheetsDeliveryConfig.from_settings(s))
    try:
        model = await SentimentModel.load_async(SentimentModelConfig.from_settings(s))
        session = AnalysisSession(delivery, classify=model.classify)
        session.replace_corpus(corpus)

        outcome = await session.analyze_corpus()
        await session.drain_deliveries()
    except ReviewSentimentError as e:
        logger.error("Batch analysis aborted: %s", e)
        print(json.dumps({"error": e.user_message}, ensure_ascii=False))
        return
    finally:
        delivery.close()

    counts = Counter(r.category for r in outcome.results)
    summary = {
        "total": len(corpus),
        "analyzed": len(outcome.results),
        "failed": len(outcome.failures),
        "by_sentiment": dict(counts),
        "sample": [r.to_dict() for r in outcome.results[:5]],
    }
    print(json.dumps(summary, ensure_ascii=False, indent=2))


def main() -> None:
    s = load_settings()
    parser = argparse.ArgumentParser(description="Analyze every review in a TSV file.")
    parser.add_argument("path", help="Tab-separated file with a header row.")
    parser.add_argument("--column", default=s.batch_text_column)
    parser.add_argument("--limit", type=int, default=None)
    args = parser.parse_args()

    asyncio.run(_run(args.path, args.column, args.limit))


if __name__ == "__main__":
    main()
