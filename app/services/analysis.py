"""Relay an uploaded image to the vision model and map its failures."""
from __future__ import annotations

import asyncio
import logging

from app.config import Settings
from app.errors import (
    AnalyzerError,
    ConfigurationError,
    UpstreamAuthError,
    UpstreamBadImageError,
    UpstreamRateLimitError,
    UpstreamUnknownError,
)
from app.models import AnalysisRequest, AnalysisResult, UploadedImage
from app.services.llm import LLMProvider, LLMProviderError

logger = logging.getLogger(__name__)


# Exact wording matters: the model is asked to follow this template, and the
# frontend renders whatever comes back.
MATH_SORT_PROMPT = (
    "Look at this image and identify all the numbers and mathematical expressions you can see. "
    "Calculate the decimal value of each expression. Sort everything from least to greatest "
    "and format your response exactly like this:\n"
    "\n"
    "Sorted from least to greatest:\n"
    "1. 2/6 = 0.333\n"
    "2. π/6 = 0.524\n"
    "3. √12 ≈ 3.464\n"
    "4. 3! = 6\n"
    "5. log₂(25) ≈ 4.644\n"
    "6. Σ(i=1)^5 i = 15\n"
    "7. ∫₁¹ x dx = 17.5\n"
    "8. e^5 ≈ 148.413\n"
    "9. ∞ = infinity\n"
    "\n"
    "IMPORTANT: Use proper mathematical symbols (√, π, ², ³, ≈, ∞, Σ, ∫, etc.) and clean formatting. "
    "Do NOT use backslashes, LaTeX code, or any \\commands. Use Unicode symbols only."
)


def map_provider_error(exc: LLMProviderError, *, include_details: bool = False) -> AnalyzerError:
    """Translate an upstream failure into the error returned to the client."""

    if exc.status == 401:
        return UpstreamAuthError()
    if exc.status == 429:
        return UpstreamRateLimitError()
    # Substring match on the upstream message text. Fragile: breaks silently
    # if the upstream rewords its image errors.
    if exc.status == 400 and "image" in exc.message:
        return UpstreamBadImageError()
    return UpstreamUnknownError(details=exc.message if include_details else None)


class AnalysisRelay:
    """Sends one uploaded image to the model and returns its answer."""

    def __init__(self, provider: LLMProvider, settings: Settings) -> None:
        self._provider = provider
        self._settings = settings

    @property
    def include_details(self) -> bool:
        return not self._settings.is_production

    async def analyze(self, image: UploadedImage) -> AnalysisResult:
        if not self._settings.openai_api_key:
            raise ConfigurationError()

        request = AnalysisRequest.from_upload(image, instruction=MATH_SORT_PROMPT)
        logger.info("Analyzing image: %s (%d bytes)", image.filename, image.size_bytes)

        try:
            text, meta = await asyncio.to_thread(self._provider.chat, request.to_messages())
        except LLMProviderError as exc:
            logger.warning("Upstream analysis failed (status=%s): %s", exc.status, exc.message)
            raise map_provider_error(exc, include_details=self.include_details) from exc
        except Exception as exc:
            logger.exception("Error analyzing image: %s", exc)
            raise UpstreamUnknownError(details=str(exc) if self.include_details else None) from exc

        logger.info("Analysis completed successfully")
        logger.debug("LLM call metadata: %s", meta)
        return AnalysisResult(text=text, metadata=image.metadata())
