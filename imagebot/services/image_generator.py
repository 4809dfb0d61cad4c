"""Text-to-image generation through the OpenAI images endpoint."""
from __future__ import annotations

import logging

from openai import AsyncOpenAI

from imagebot.models import GenerationRequest

logger = logging.getLogger(__name__)

VALID_SIZES = ("1024x1024", "1792x1024", "1024x1792")


class InvalidSizeError(ValueError):
    """Raised when the requested output size is not one of VALID_SIZES."""


class GenerationFailedError(RuntimeError):
    """Raised when the API answers without an image URL."""


class ImageGenerator:
    """Single-shot image generation: one request, first result URL."""

    def __init__(self, client: AsyncOpenAI, *, model: str) -> None:
        self._client = client
        self._model = model

    async def generate(self, prompt: str, size: str = "1024x1024") -> str:
        logger.info("Generating image. prompt=%r size=%s", prompt, size)
        if size not in VALID_SIZES:
            logger.info("Invalid image size: %s", size)
            raise InvalidSizeError(
                f"Invalid size. Please use one of the following valid sizes: {', '.join(VALID_SIZES)}"
            )
        request = GenerationRequest(prompt=prompt, size=size)

        try:
            logger.debug("Calling images.generate with model %s", self._model)
            response = await self._client.images.generate(
                model=self._model,
                prompt=request.prompt,
                n=1,
                size=request.size,
            )
            logger.debug("images.generate response received")

            if not response.data or not response.data[0].url:
                raise GenerationFailedError("Image generation failed, no image URL returned.")
        except Exception:
            logger.exception("Image generation failed")
            raise

        url = response.data[0].url
        logger.info("Generated image URL: %s", url)
        return url
