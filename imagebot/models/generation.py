from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

ImageSize = Literal["1024x1024", "1792x1024", "1024x1792"]


class GenerationRequest(BaseModel):
    prompt: str
    size: ImageSize = "1024x1024"
