"""Telegram Bot API wrapper.

Provides async helper methods for sending replies and downloading files
from the bot file store.  Only text and photo-by-URL replies are supported.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class TelegramAPIError(Exception):
    """Raised when the Telegram Bot API or file store returns an error status."""

    def __init__(self, status: int, message: str, response_json: Optional[dict[str, Any]] = None):
        super().__init__(f"Telegram API error {status}: {message}")
        self.status = status
        self.response_json = response_json or {}


class TelegramClient:
    """Minimal async client for the Telegram Bot API."""

    _CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        *,
        token: str,
        file_host: str = "api.telegram.org",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._token = token
        self._file_host = file_host
        self._base_url = f"https://{file_host}/bot{token}"
        self._file_url = f"https://{file_host}/file/bot{token}"
        self._client = http_client or httpx.AsyncClient(timeout=30.0)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_file(self, file_id: str) -> dict[str, Any]:
        """Resolve a file id into its ``File`` object (``file_path``, ``file_size``)."""

        return await self._call("getFile", {"file_id": file_id})

    async def download_file(self, file_path: str, dest: Path) -> int:
        """Stream a stored file to *dest* and return the number of bytes written."""

        url = f"{self._file_url}/{file_path}"
        logger.debug("GET file %s", file_path)
        written = 0
        async with self._client.stream("GET", url) as resp:
            if resp.status_code >= 400:
                await resp.aread()
                raise TelegramAPIError(resp.status_code, "Failed to download file")
            with open(dest, "wb") as fh:
                async for chunk in resp.aiter_bytes(self._CHUNK_SIZE):
                    fh.write(chunk)
                    written += len(chunk)
        logger.debug("Downloaded %d bytes to %s", written, dest)
        return written

    async def send_message(self, chat_id: int | str, text: str) -> int:
        result = await self._call("sendMessage", {"chat_id": chat_id, "text": text})
        return result.get("message_id")

    async def send_photo(self, chat_id: int | str, photo_url: str, *, caption: str | None = None) -> int:
        payload: dict[str, Any] = {"chat_id": chat_id, "photo": photo_url}
        if caption:
            payload["caption"] = caption
        result = await self._call("sendPhoto", payload)
        return result.get("message_id")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        # the token is part of the URL, so only the method name is logged
        logger.debug("POST %s -> %s", method, payload)
        resp = await self._client.post(f"{self._base_url}/{method}", json=payload)
        try:
            data = resp.json()
        except ValueError:
            data = None
        if resp.status_code >= 400 or not (data or {}).get("ok", False):
            description = (data or {}).get("description") or resp.text
            raise TelegramAPIError(resp.status_code, description, data)
        return data["result"]

    async def close(self) -> None:
        await self._client.aclose()
