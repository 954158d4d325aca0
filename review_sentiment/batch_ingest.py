from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from review_sentiment.errors import ParseError

logger = logging.getLogger(__name__)


def parse_tsv(content: str) -> list[dict[str, Any]]:
    """
    Parse tab-separated text with a header row into row dicts.

    Cells are kept as strings; rows shorter than the header get non-string
    (NaN) cells which the projection step skips.

    Raises:
        ParseError: the parser rejected a row (first error only)
    """
    try:
        df = pd.read_csv(
            io.StringIO(content),
            sep="\t",
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        first = str(e).strip().splitlines()[0] if str(e).strip() else "unknown parser error"
        logger.warning("TSV parse failed: %s", first)
        raise ParseError(f"TSV parse error: {first}") from e

    rows = df.to_dict(orient="records")
    if not isinstance(rows, list):
        raise ParseError("TSV parse error: parser did not return rows")
    return rows


def extract_texts(rows: Sequence[Any], column: str) -> list[str]:
    """
    Project one text column to a flat list.

    Rules:
    - non-dict rows are skipped
    - non-string cells are skipped
    - values are stripped; empty results are skipped
    - order and duplicates are kept
    """
    out: list[str] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        value = row.get(column)
        if not isinstance(value, str):
            continue
        value = value.strip()
        if value:
            out.append(value)
    return out


def load_corpus(content: str, column: str) -> list[str]:
    rows = parse_tsv(content)
    texts = extract_texts(rows, column)
    logger.info("Loaded corpus: rows=%s texts=%s column=%s", len(rows), len(texts), column)
    return texts


def load_corpus_file(path: str | Path, column: str) -> list[str]:
    return load_corpus(Path(path).read_text(encoding="utf-8"), column)
