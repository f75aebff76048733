"""Error types surfaced by the analysis API.

Every failure a request can hit is an :class:`AnalyzerError` carrying the
HTTP status and the user-facing message. The exception handler in
``app.main`` renders them as ``{"error": ..., "details": ...}``.
"""
from __future__ import annotations

from typing import Optional


class AnalyzerError(Exception):
    """Base class for errors that map to a JSON error response."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, details: Optional[str] = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class UploadValidationError(AnalyzerError):
    """The uploaded form is missing the image, has the wrong type or is too big."""

    status_code = 400
    default_message = "No image file provided"


class ConfigurationError(AnalyzerError):
    status_code = 500
    default_message = "OpenAI API key not configured. Please set OPENAI_API_KEY environment variable."


class UpstreamAuthError(AnalyzerError):
    status_code = 401
    default_message = "Invalid OpenAI API key. Please check your API key configuration."


class UpstreamRateLimitError(AnalyzerError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."


class UpstreamBadImageError(AnalyzerError):
    status_code = 400
    default_message = "Image format not supported or image too large."


class UpstreamUnknownError(AnalyzerError):
    status_code = 500
    default_message = "Failed to analyze image. Please try again later."
