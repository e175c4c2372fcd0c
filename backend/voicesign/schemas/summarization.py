from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SummarizationRequest(BaseModel):
    text: Optional[str] = None


class SummarizationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str = ""
    keywords: List[str] = Field(default_factory=list, max_length=5)
    original_text: str = Field(default="", alias="originalText")
