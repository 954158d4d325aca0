from __future__ import annotations


class ReviewSentimentError(Exception):
    """Base error. `user_message` is safe to show in the UI."""

    user_message = "Failed to analyze sentiment."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)


class ModelLoadError(ReviewSentimentError):
    user_message = "Failed to load sentiment analysis model. Please refresh the page."


class ModelNotReadyError(ReviewSentimentError):
    user_message = "Sentiment model is still loading. Please wait."


class InferenceError(ReviewSentimentError):
    user_message = "Analysis failed. Please try again."


class InvalidOutputError(ReviewSentimentError):
    user_message = "Analysis failed. Please try again."


class InvalidOutputShape(InvalidOutputError):
    """Raw output is not a non-empty list of prediction dicts (flat or singly nested)."""


class InvalidOutputFields(InvalidOutputError):
    """Top prediction lacks a string `label` or numeric `score`."""


class EmptyReviewError(ReviewSentimentError):
    user_message = "Please enter a review text to analyze."


class AnalyzerBusyError(ReviewSentimentError):
    user_message = "An analysis is already running. Please wait."


class ParseError(ReviewSentimentError):
    user_message = (
        "Could not parse the review file. Make sure it is tab-separated "
        "with a header row."
    )


class DeliveryError(ReviewSentimentError):
    user_message = "Failed to save to Google Sheets"
