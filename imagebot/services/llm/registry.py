from __future__ import annotations

from imagebot.config import Settings

from .openai_provider import OpenAIProvider
from .base import LLMProvider

_PROVIDERS: dict[str, type[LLMProvider]] = {
    "openai": OpenAIProvider,
}


def get_provider(settings: Settings, **kwargs) -> LLMProvider:
    provider_key = settings.llm_provider.lower()
    if provider_key not in _PROVIDERS:
        raise ValueError(f"Unsupported LLM provider: {provider_key}")
    return _PROVIDERS[provider_key](settings, **kwargs)
