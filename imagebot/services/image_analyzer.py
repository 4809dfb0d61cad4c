"""Multimodal analysis of an inline (data URI) image."""
from __future__ import annotations

import logging

import openai
from langchain_core.messages import ChatMessage, HumanMessage

from imagebot.models import ResultKind, UploadResult

from .llm import LLMProvider

logger = logging.getLogger(__name__)

NO_RESPONSE_MESSAGE = "No response received from the API. Please try again later."


class ImageAnalyzer:
    """Build the system + user/image exchange and flatten failures into results."""

    def __init__(
        self,
        provider: LLMProvider,
        *,
        system_message: str,
        system_role: str = "system",
        max_tokens: int = 300,
    ) -> None:
        self._provider = provider
        self._system_message = system_message
        self._system_role = system_role
        self._max_tokens = max_tokens

    def build_messages(self, base64_content: str, mime_type: str, prompt: str) -> list:
        return [
            ChatMessage(role=self._system_role, content=self._system_message),
            HumanMessage(
                content=[
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{base64_content}"},
                    },
                ]
            ),
        ]

    async def analyze(self, base64_content: str, mime_type: str, prompt: str, model: str) -> UploadResult:
        messages = self.build_messages(base64_content, mime_type, prompt)
        try:
            text = await self._provider.chat(messages, model=model, max_tokens=self._max_tokens)
        except openai.APIStatusError as exc:
            logger.error("Chat completion returned %s: %s", exc.status_code, exc)
            return UploadResult(
                kind=ResultKind.TRANSPORT_ERROR,
                text=f"API Error: {exc.status_code} - {_error_message(exc)}",
            )
        except openai.APIConnectionError as exc:
            logger.error("No response from chat completion API: %s", exc)
            return UploadResult(kind=ResultKind.TRANSPORT_ERROR, text=NO_RESPONSE_MESSAGE)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Chat completion call failed")
            return UploadResult(kind=ResultKind.TRANSPORT_ERROR, text=f"Error: {exc}")

        return UploadResult(kind=ResultKind.SUCCESS, text=text)


def _error_message(exc: openai.APIStatusError) -> str:
    # body is the "error" object of the JSON payload when the API sent one
    body = exc.body
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return exc.message
