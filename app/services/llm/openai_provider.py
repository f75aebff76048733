from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import openai
from langchain_core.messages import BaseMessage
from langchain_openai import ChatOpenAI

from app.config import Settings

from .base import LLMProvider, LLMProviderError

logger = logging.getLogger(__name__)

OPENAI_VISION_MODEL = "gpt-4o"
MAX_OUTPUT_TOKENS = 500


class OpenAIProvider(LLMProvider):
    name = "openai"

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._llm: Optional[ChatOpenAI] = None

    @property
    def llm(self) -> ChatOpenAI:
        # Built on first use: constructing the client needs the API key, and
        # the server has to start without one.
        if self._llm is None:
            self._llm = ChatOpenAI(
                model=OPENAI_VISION_MODEL,
                api_key=self._settings.openai_api_key,
                max_tokens=MAX_OUTPUT_TOKENS,
                max_retries=0,
            )
        return self._llm

    def chat(self, messages: Sequence[BaseMessage]) -> tuple[str, dict[str, Any]]:
        """Execute one chat completion and return the first choice's text.

        OpenAI SDK errors are translated to :class:`LLMProviderError` so the
        caller can map them without depending on the SDK.
        """

        try:
            output = self.llm.invoke(list(messages))
        except openai.APIStatusError as exc:
            raise LLMProviderError(exc.status_code, exc.message) from exc
        except openai.APIConnectionError as exc:
            # Includes APITimeoutError
            raise LLMProviderError(None, str(exc)) from exc

        text = output.content
        if not isinstance(text, str):
            raise LLMProviderError(None, "Model response did not contain text content")

        meta: dict[str, Any] = {
            "model": OPENAI_VISION_MODEL,
            "max_tokens": MAX_OUTPUT_TOKENS,
            **(output.usage_metadata or {}),
        }
        return text, meta
