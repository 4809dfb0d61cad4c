import io
import struct
import zlib
import os

os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456:TEST")

import httpx
import pytest
from PIL import Image

from imagebot.config import Settings
from imagebot.services.llm import LLMProvider
from imagebot.services.telegram import TelegramClient

BOT_TOKEN = "123456:TEST"


@pytest.fixture
def anyio_backend():
    # asyncio only, no trio needed
    return "asyncio"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        telegram_bot_token=BOT_TOKEN,
        temp_dir=str(tmp_path),
    )


def image_bytes(fmt: str) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return image_bytes("JPEG")


@pytest.fixture
def gif_bytes():
    return image_bytes("GIF")


class FakeProvider(LLMProvider):
    name = "fake"

    def __init__(self, reply="A red square.", exc: Exception | None = None):
        self.reply = reply
        self.exc = exc
        self.calls = []

    async def chat(self, messages, *, model, max_tokens):
        self.calls.append({"messages": list(messages), "model": model, "max_tokens": max_tokens})
        if self.exc is not None:
            raise self.exc
        return self.reply


@pytest.fixture
def fake_provider():
    return FakeProvider()


class FileStore:
    """Serves Telegram file downloads from an in-memory dict and records requests."""

    def __init__(self, files: dict[str, bytes] | None = None):
        self.files = files or {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        prefix = f"/file/bot{BOT_TOKEN}/"
        path = request.url.path
        if path.startswith(prefix) and path[len(prefix):] in self.files:
            return httpx.Response(200, content=self.files[path[len(prefix):]])
        return httpx.Response(404, text="Not Found")

    def client(self) -> TelegramClient:
        transport = httpx.MockTransport(self.handler)
        return TelegramClient(token=BOT_TOKEN, http_client=httpx.AsyncClient(transport=transport))


@pytest.fixture
def file_store():
    return FileStore()


@pytest.fixture
def mpo_bytes():
    # two-frame multi-picture JPEG, as produced by many phone cameras
    buf = io.BytesIO()
    first = Image.new("RGB", (8, 8), (200, 30, 30))
    second = Image.new("RGB", (8, 8), (30, 200, 30))
    first.save(buf, format="MPO", save_all=True, append_images=[second])
    return buf.getvalue()


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))


@pytest.fixture
def huge_png_bytes():
    """A tiny PNG whose header declares 20000x20000 bilevel pixels."""
    ihdr = struct.pack(">IIBBBBB", 20000, 20000, 1, 0, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + _png_chunk(b"IHDR", ihdr) + _png_chunk(b"IEND", b"")
