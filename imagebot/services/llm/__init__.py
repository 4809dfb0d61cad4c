from __future__ import annotations

from .base import LLMProvider
from .openai_provider import OpenAIProvider
from .registry import get_provider

__all__ = [
    "LLMProvider",
    "OpenAIProvider",
    "get_provider",
]
