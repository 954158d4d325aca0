from __future__ import annotations

from collections.abc import Mapping
from numbers import Real
from typing import Any

from review_sentiment.errors import InvalidOutputFields, InvalidOutputShape
from review_sentiment.sentiment_types import SentimentRecord


def _top_prediction(raw: Any) -> Mapping[str, Any]:
    """
    Pick the first (highest ranked) prediction.

    Accepted shapes, tried in order:
    - flat:   [{"label": ..., "score": ...}, ...]
    - nested: [[{"label": ..., "score": ...}, ...]]
    """
    if not isinstance(raw, (list, tuple)) or not raw:
        raise InvalidOutputShape("Invalid sentiment output from model: expected a non-empty list.")

    first = raw[0]
    if isinstance(first, Mapping):
        return first

    if isinstance(first, (list, tuple)):
        if first and isinstance(first[0], Mapping):
            return first[0]
        raise InvalidOutputShape("Invalid sentiment output from model: empty or malformed nested list.")

    raise InvalidOutputShape(
        f"Invalid sentiment output from model: unexpected element type {type(first).__name__}."
    )


def normalize_output(raw: Any) -> SentimentRecord:
    """
    Convert raw pipeline output into a SentimentRecord.

    Only the top prediction is used; the rest are ignored.

    Raises:
        InvalidOutputShape: not a non-empty list (flat or singly nested) of dicts
        InvalidOutputFields: top prediction lacks a str label or numeric score
    """
    top = _top_prediction(raw)

    label = top.get("label")
    score = top.get("score")
    if not isinstance(label, str):
        raise InvalidOutputFields("Invalid sentiment output from model: missing string 'label'.")
    if isinstance(score, bool) or not isinstance(score, Real):
        raise InvalidOutputFields("Invalid sentiment output from model: missing numeric 'score'.")

    return SentimentRecord(label=label.upper(), score=float(score))
