from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UploadDescriptor(BaseModel):
    """A file already known to the Telegram file store.

    Built straight from a ``getFile`` result, hence the ``file_size`` alias.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_id: str
    file_path: str = ""
    file_size_bytes: int = Field(0, ge=0, alias="file_size")

    @field_validator("file_size_bytes", mode="before")
    @classmethod
    def _missing_size_is_zero(cls, value):
        # Telegram omits file_size when it is unknown
        return 0 if value is None else value

    @property
    def extension(self) -> str:
        return self.file_path.rsplit(".", 1)[-1].lower()


class DetectedContentType(BaseModel):
    mime_type: str


class ResultKind(str, Enum):
    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    TRANSPORT_ERROR = "transport_error"
    RETRIEVAL_FAILED = "retrieval_failed"
    PROCESSING_ERROR = "processing_error"


class UploadResult(BaseModel):
    """Outcome of an upload: the reply text plus what kind of reply it is."""

    kind: ResultKind
    text: str

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.SUCCESS

    def __str__(self) -> str:
        return self.text
