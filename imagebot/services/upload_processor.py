"""Validation and dispatch of user-uploaded images.

An upload goes through a fixed sequence:

    size check -> model check -> extension check -> download -> content sniff
    -> base64 encode -> analysis

Every step reports its outcome as an :class:`UploadResult`; nothing past the
download is raised to the caller.  The downloaded bytes live in a temporary
file named after the Telegram file id plus a random suffix, so two uploads of
the same file never share a path.  That file is removed before
``handle_upload`` returns, whichever way it returns.
"""
from __future__ import annotations

import base64
import logging
import re
import struct
import uuid
from pathlib import Path

import httpx
from PIL import Image

from imagebot.models import DetectedContentType, ResultKind, UploadDescriptor, UploadResult

from .image_analyzer import ImageAnalyzer
from .telegram import TelegramAPIError, TelegramClient

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
SUPPORTED_MODELS = ("gpt-4o", "gpt-4o-mini", "gpt-4")
SUPPORTED_IMAGE_TYPES = ("image/jpeg", "image/png")
SUPPORTED_EXTENSIONS = ("jpg", "jpeg", "png")

CONTENT_MISMATCH_MESSAGE = (
    "Invalid file type. The file content does not match its extension. "
    "Only JPEG and PNG images are supported."
)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")

_HEADER_BYTES = 16
# multi-picture camera JPEGs are reported by Pillow as MPO
_MIME_OVERRIDES = {"MPO": "image/jpeg"}


class UploadProcessor:
    """Turn an uploaded Telegram image plus a prompt into an analysis reply."""

    def __init__(
        self,
        *,
        telegram: TelegramClient,
        analyzer: ImageAnalyzer,
        temp_dir: str | Path,
        max_file_size: int = MAX_FILE_SIZE,
        propagate_download_errors: bool = False,
    ) -> None:
        self._telegram = telegram
        self._analyzer = analyzer
        self._temp_dir = Path(temp_dir)
        self._max_file_size = max_file_size
        self._propagate_download_errors = propagate_download_errors

    def temp_path_for(self, file_id: str) -> Path:
        safe_id = _UNSAFE_CHARS.sub("_", file_id)
        return self._temp_dir / f"imagebot-{safe_id}-{uuid.uuid4().hex}"

    async def handle_upload(self, descriptor: UploadDescriptor, prompt: str, model: str) -> UploadResult:
        if descriptor.file_size_bytes > self._max_file_size:
            limit_mb = self._max_file_size // (1024 * 1024)
            return _invalid(f"File size exceeds the {limit_mb}MB limit.")

        if model not in SUPPORTED_MODELS:
            return _invalid(f"Unsupported model. This feature only supports: {', '.join(SUPPORTED_MODELS)}")

        if descriptor.extension not in SUPPORTED_EXTENSIONS:
            return _invalid(f"Unsupported file type. Supported types are: {', '.join(SUPPORTED_EXTENSIONS)}")

        temp_path = self.temp_path_for(descriptor.file_id)
        try:
            try:
                await self._telegram.download_file(descriptor.file_path, temp_path)
            except (httpx.HTTPError, TelegramAPIError, OSError) as exc:
                logger.error("Download of %s failed: %s", descriptor.file_id, exc)
                if self._propagate_download_errors:
                    raise
                return UploadResult(kind=ResultKind.RETRIEVAL_FAILED, text=f"Failed to retrieve the file: {exc}")

            try:
                file_bytes = temp_path.read_bytes()
                detected = sniff_content_type(file_bytes)
                if detected is None or detected.mime_type not in SUPPORTED_IMAGE_TYPES:
                    logger.info("Rejected %s: sniffed type %s", descriptor.file_path, detected)
                    temp_path.unlink(missing_ok=True)
                    return _invalid(CONTENT_MISMATCH_MESSAGE)

                base64_content = base64.b64encode(file_bytes).decode("ascii")
                temp_path.unlink(missing_ok=True)

                return await self._analyzer.analyze(base64_content, detected.mime_type, prompt, model)
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception("Error in image processing")
                return UploadResult(kind=ResultKind.PROCESSING_ERROR, text=f"Image processing error: {exc}")
        finally:
            temp_path.unlink(missing_ok=True)


def sniff_content_type(file_bytes: bytes) -> DetectedContentType | None:
    """Detect the MIME type from the file signature, ignoring any file name.

    Only the format signatures Pillow registers are checked against the
    header; nothing is decoded, so image dimensions play no part.
    """

    Image.init()
    header = file_bytes[:_HEADER_BYTES]
    for fmt in Image.ID:
        _, accept = Image.OPEN[fmt]
        if accept is None:
            continue
        try:
            matched = accept(header)
        except (IndexError, TypeError, struct.error, SyntaxError):
            continue
        # a str result means "recognised but unsupported" in Pillow's registry
        if matched and not isinstance(matched, str):
            mime_type = _MIME_OVERRIDES.get(fmt) or Image.MIME.get(fmt)
            return DetectedContentType(mime_type=mime_type) if mime_type else None
    return None


def _invalid(text: str) -> UploadResult:
    return UploadResult(kind=ResultKind.VALIDATION_ERROR, text=text)
