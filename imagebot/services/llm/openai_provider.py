from __future__ import annotations

import logging
from typing import Sequence

import httpx
from langchain_core.messages import BaseMessage
from langchain_openai import ChatOpenAI

from imagebot.config import Settings

from .base import LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    name = "openai"

    def __init__(self, settings: Settings, *, http_async_client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._http_async_client = http_async_client
        self._llms: dict[tuple[str, int], ChatOpenAI] = {}

    def _llm_for(self, model: str, max_tokens: int) -> ChatOpenAI:
        key = (model, max_tokens)
        if key not in self._llms:
            self._llms[key] = ChatOpenAI(
                model=model,
                api_key=self._settings.openai_api_key,
                base_url=self._settings.openai_base_url,
                max_tokens=max_tokens,
                max_retries=0,
                http_async_client=self._http_async_client,
            )
        return self._llms[key]

    async def chat(
        self,
        messages: Sequence[BaseMessage],
        *,
        model: str,
        max_tokens: int,
    ) -> str:
        """Execute a single chat completion, no retries."""

        llm = self._llm_for(model, max_tokens)
        output = await llm.ainvoke(list(messages))

        usage = getattr(output, "usage_metadata", None) or {}
        logger.debug("Completion usage for %s: %s", model, usage)
        return output.content
