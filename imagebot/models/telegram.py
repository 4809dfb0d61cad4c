"""Subset of the Telegram Bot API update schema used by the webhook."""
from __future__ import annotations

from pydantic import BaseModel


class TelegramChat(BaseModel):
    id: int


class TelegramPhotoSize(BaseModel):
    file_id: str
    width: int
    height: int
    file_size: int | None = None


class TelegramDocument(BaseModel):
    file_id: str
    file_name: str | None = None
    mime_type: str | None = None
    file_size: int | None = None


class TelegramMessage(BaseModel):
    message_id: int
    chat: TelegramChat
    text: str | None = None
    caption: str | None = None
    photo: list[TelegramPhotoSize] = []
    document: TelegramDocument | None = None

    @property
    def image_file_id(self) -> str | None:
        """File id of the uploaded image, if any (largest photo size wins)."""
        if self.photo:
            return max(self.photo, key=lambda p: p.width * p.height).file_id
        if self.document and (self.document.mime_type or "").startswith("image/"):
            return self.document.file_id
        return None


class TelegramUpdate(BaseModel):
    update_id: int
    message: TelegramMessage | None = None
