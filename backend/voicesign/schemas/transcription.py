from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TranscriptionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Optional here so a missing value reaches the handler and gets the
    # proxy's own 400 payload.
    audio: Optional[str] = Field(default=None, description="Base64 audio, bare or data URL")
    mime_type: Optional[str] = Field(default=None, alias="mimeType")


class TranscriptionResponse(BaseModel):
    text: str
