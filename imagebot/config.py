from __future__ import annotations

import tempfile
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    # OpenAI
    openai_api_key: str = Field(..., description="Credential for the image and chat APIs")
    openai_base_url: Optional[str] = Field(default=None, description="Override for OpenAI-compatible gateways")
    dall_e_model: str = "dall-e-3"
    openai_model: str = Field("gpt-4o", description="Vision model used for uploaded images")

    # LLM provider selection & analysis params
    llm_provider: str = "openai"
    analysis_max_tokens: int = Field(300, ge=1)
    system_init_message: str = "You are a helpful assistant that describes and analyses images."
    system_init_message_role: str = "system"
    default_analysis_prompt: str = "What is in this image?"

    # Telegram Bot API
    telegram_bot_token: str = Field(...)
    telegram_file_host: str = "api.telegram.org"
    telegram_webhook_secret: Optional[str] = Field(
        default=None,
        description="Expected X-Telegram-Bot-Api-Secret-Token header; verification is skipped when unset.",
    )

    # Uploads
    max_upload_bytes: int = Field(10 * 1024 * 1024, description="Upload size ceiling in bytes (10 MiB).")
    temp_dir: str = Field(default_factory=tempfile.gettempdir)
    propagate_download_errors: bool = Field(
        False,
        description="If true, a failed download raises to the caller instead of returning a result.",
    )

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
