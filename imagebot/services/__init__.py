"""Service wiring: every client is built once from Settings and passed down."""
from __future__ import annotations

from dataclasses import dataclass

from openai import AsyncOpenAI

from imagebot.config import Settings

from .image_analyzer import ImageAnalyzer
from .image_generator import ImageGenerator
from .llm import get_provider
from .telegram import TelegramClient
from .upload_processor import UploadProcessor


@dataclass
class BotServices:
    settings: Settings
    telegram: TelegramClient
    image_generator: ImageGenerator
    upload_processor: UploadProcessor
    openai_client: AsyncOpenAI | None = None

    async def aclose(self) -> None:
        await self.telegram.close()
        if self.openai_client is not None:
            await self.openai_client.close()


def build_services(settings: Settings) -> BotServices:
    openai_client = AsyncOpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        max_retries=0,
    )
    telegram = TelegramClient(token=settings.telegram_bot_token, file_host=settings.telegram_file_host)
    analyzer = ImageAnalyzer(
        get_provider(settings),
        system_message=settings.system_init_message,
        system_role=settings.system_init_message_role,
        max_tokens=settings.analysis_max_tokens,
    )
    return BotServices(
        settings=settings,
        telegram=telegram,
        image_generator=ImageGenerator(openai_client, model=settings.dall_e_model),
        upload_processor=UploadProcessor(
            telegram=telegram,
            analyzer=analyzer,
            temp_dir=settings.temp_dir,
            max_file_size=settings.max_upload_bytes,
            propagate_download_errors=settings.propagate_download_errors,
        ),
        openai_client=openai_client,
    )


__all__ = [
    "BotServices",
    "build_services",
    "ImageAnalyzer",
    "ImageGenerator",
    "TelegramClient",
    "UploadProcessor",
]
