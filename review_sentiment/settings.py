from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

PLACEHOLDER_MARKER = "YOUR_SCRIPT_ID"


class AppSettings(BaseSettings):
    """
    Environment-driven settings for review sentiment inference + sheet logging.
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # ---- Sentiment inference ----
    sentiment_model_id: str = Field(
        default="nlptown/bert-base-multilingual-uncased-sentiment",
        alias="SENTIMENT_MODEL_ID",
    )
    # Optional credential for gated/private hub models
    hf_token: str | None = Field(default=None, alias="HF_TOKEN")

    # Device: "auto" | "cpu" | "cuda"
    sentiment_device: str = Field(default="auto", alias="SENTIMENT_DEVICE")

    # Longer reviews are cut and suffixed with "..." before inference
    sentiment_max_input_chars: int = Field(default=1000, alias="SENTIMENT_MAX_INPUT_CHARS")

    # ---- Spreadsheet logging ----
    sheets_webhook_url: str = Field(
        default=f"https://script.google.com/macros/s/{PLACEHOLDER_MARKER}/exec",
        alias="SHEETS_WEBHOOK_URL",
    )
    sheets_sheet_name: str = Field(default="SentimentAnalysis", alias="SHEETS_SHEET_NAME")
    sheets_source_tag: str = Field(default="Web App", alias="SHEETS_SOURCE_TAG")
    sheets_request_timeout_sec: float = Field(default=10.0, alias="SHEETS_REQUEST_TIMEOUT_SEC")
    sheets_user_agent: str = Field(default="review-sentiment/0.1", alias="SHEETS_USER_AGENT")

    # ---- Batch ingestion ----
    batch_text_column: str = Field(default="text", alias="BATCH_TEXT_COLUMN")


def load_settings() -> AppSettings:
    return AppSettings()


def is_placeholder_url(url: str | None) -> bool:
    return not url or not url.strip() or PLACEHOLDER_MARKER in url
