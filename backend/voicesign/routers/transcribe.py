from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends

from ..core.settings import Settings, get_settings
from ..deps import get_http_client
from ..schemas import TranscriptionRequest, TranscriptionResponse
from ..services import transcription

router = APIRouter(prefix="/v1", tags=["transcription"])


@router.post("/transcribe-audio", response_model=TranscriptionResponse)
async def transcribe_audio(
    body: TranscriptionRequest,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> TranscriptionResponse:
    """Transcribe base64 audio to Thai text."""
    text = await transcription.transcribe_audio(
        body.audio,
        body.mime_type,
        settings=settings,
        client=client,
    )
    return TranscriptionResponse(text=text)
