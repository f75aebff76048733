from __future__ import annotations

from .base import LLMProvider, LLMProviderError
from .registry import build_provider, get_provider

__all__ = [
    "LLMProvider",
    "LLMProviderError",
    "build_provider",
    "get_provider",
]
