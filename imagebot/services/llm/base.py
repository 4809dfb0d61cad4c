from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from langchain_core.messages import BaseMessage


class LLMProvider(ABC):
    """Abstract interface for a multimodal chat-completion provider."""

    name: str = "abstract"

    @abstractmethod
    async def chat(
        self,
        messages: Sequence[BaseMessage],
        *,
        model: str,
        max_tokens: int,
    ) -> str:
        """Run a chat completion and return the first choice's text.

        Provider SDK errors are raised unchanged; callers decide how to
        report them.
        """
