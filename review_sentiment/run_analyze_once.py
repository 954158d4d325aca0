from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from review_sentiment.analyzer import AnalysisSession
from review_sentiment.errors import ReviewSentimentError
from review_sentiment.sentiment_model import SentimentModel, SentimentModelConfig
from review_sentiment.settings import load_settings
from review_sentiment.sheets_delivery import DeliveryPipeline, SheetsDeliveryConfig

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def _run(text: str, log_to_sheet: bool | None) -> int:
    s = load_settings()

    delivery = DeliveryPipeline(SheetsDeliveryConfig.from_settings(s))
    if log_to_sheet is not None:
        delivery.toggle(log_to_sheet)

    try:
        model = await SentimentModel.load_async(SentimentModelConfig.from_settings(s))
        session = AnalysisSession(delivery, classify=model.classify)
        try:
            result = await session.analyze(text)
        except ReviewSentimentError as e:
            logger.error("Analysis failed: %s", e)
            print(json.dumps({"error": e.user_message}, ensure_ascii=False))
            return 1

        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        # CLI only: let the sheet log finish before the loop closes
        await session.drain_deliveries()
        return 0
    except ReviewSentimentError as e:
        print(json.dumps({"error": e.user_message}, ensure_ascii=False))
        return 1
    finally:
        delivery.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Analyze the sentiment of one review.")
    parser.add_argument("text", nargs="?", help="Review text (reads stdin when omitted).")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--log-to-sheet", dest="log_to_sheet", action="store_true", default=None)
    group.add_argument("--no-log-to-sheet", dest="log_to_sheet", action="store_false")
    args = parser.parse_args()

    text = args.text if args.text is not None else sys.stdin.read()
    sys.exit(asyncio.run(_run(text, args.log_to_sheet)))


if __name__ == "__main__":
    main()
