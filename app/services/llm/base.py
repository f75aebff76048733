from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from langchain_core.messages import BaseMessage


class LLMProviderError(Exception):
    """Raised when the upstream model API fails.

    ``status`` is the upstream HTTP status, or ``None`` for transport
    failures (connection errors, timeouts) where no response was received.
    """

    def __init__(self, status: Optional[int], message: str) -> None:
        super().__init__(f"LLM provider error {status}: {message}")
        self.status = status
        self.message = message


class LLMProvider(ABC):
    """Abstract interface for a vision-capable language-model provider."""

    name: str = "abstract"

    @abstractmethod
    def chat(self, messages: Sequence[BaseMessage]) -> tuple[str, dict[str, Any]]:
        """Run a single chat completion.

        Returns
        -------
        tuple[str, dict]
            text of the first completion choice, usage metadata

        Raises
        ------
        LLMProviderError
            if the upstream call fails.
        """
