from .generation import GenerationRequest, ImageSize
from .telegram import (
    TelegramChat,
    TelegramDocument,
    TelegramMessage,
    TelegramPhotoSize,
    TelegramUpdate,
)
from .upload import DetectedContentType, ResultKind, UploadDescriptor, UploadResult

__all__ = [
    "GenerationRequest",
    "ImageSize",
    "DetectedContentType",
    "ResultKind",
    "UploadDescriptor",
    "UploadResult",
    "TelegramChat",
    "TelegramDocument",
    "TelegramMessage",
    "TelegramPhotoSize",
    "TelegramUpdate",
]
