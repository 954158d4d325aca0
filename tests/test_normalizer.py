from __future__ import annotations

import pytest

from review_sentiment.errors import InvalidOutputError, InvalidOutputFields, InvalidOutputShape
from review_sentiment.normalizer import normalize_output


@pytest.mark.parametrize("raw", [[], (), None, "POSITIVE", 0.9, {"label": "POSITIVE", "score": 0.9}])
def test_empty_or_non_list_output_is_shape_error(raw):
    with pytest.raises(InvalidOutputShape):
        normalize_output(raw)


def test_flat_output_uses_first_prediction_and_uppercases_label():
    raw = [{"label": "positive", "score": 0.93}, {"label": "negative", "score": 0.07}]
    rec = normalize_output(raw)
    assert rec.label == "POSITIVE"
    assert rec.score == 0.93


def test_nested_output_is_accepted():
    rec = normalize_output([[{"label": "5 stars", "score": 0.61}]])
    assert rec.label == "5 STARS"
    assert rec.score == 0.61


def test_nested_output_with_empty_inner_list_is_shape_error():
    with pytest.raises(InvalidOutputShape):
        normalize_output([[]])


def test_list_of_scalars_is_shape_error():
    with pytest.raises(InvalidOutputShape):
        normalize_output(["POSITIVE"])


def test_missing_label_is_field_error():
    with pytest.raises(InvalidOutputFields):
        normalize_output([{"score": 0.9}])


@pytest.mark.parametrize("score", [None, "0.9", True])
def test_non_numeric_score_is_field_error(score):
    with pytest.raises(InvalidOutputFields):
        normalize_output([{"label": "POSITIVE", "score": score}])


def test_shape_and_field_errors_share_user_message():
    assert InvalidOutputShape().user_message == InvalidOutputFields().user_message
    assert issubclass(InvalidOutputShape, InvalidOutputError)


def test_integer_score_is_accepted():
    rec = normalize_output([{"label": "LABEL_1", "score": 1}])
    assert rec.score == 1.0
