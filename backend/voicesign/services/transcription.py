from __future__ import annotations

import httpx

from ..core.errors import ConfigurationError, ValidationError
from ..core.settings import Settings
from ..logging_utils import get_logger, preview
from . import upstream
from .audio import DEFAULT_MIME_TYPE, decode_base64_chunks, extension_for_mime, strip_data_url

log = get_logger(__name__)

SERVICE = "transcription"
LABEL = "OpenAI API"


def build_upload(
    audio_bytes: bytes,
    mime_type: str | None,
    *,
    model: str,
    language: str,
) -> tuple[dict[str, tuple[str, bytes, str]], dict[str, str]]:
    """Return the ``(files, data)`` pair for the multipart transcription request."""
    filename = f"audio.{extension_for_mime(mime_type)}"
    files = {"file": (filename, audio_bytes, mime_type or DEFAULT_MIME_TYPE)}
    data = {"model": model, "language": language}
    return files, data


async def transcribe_audio(
    audio_base64: str | None,
    mime_type: str | None,
    *,
    settings: Settings,
    client: httpx.AsyncClient,
) -> str:
    """
    Decode a base64 audio payload and transcribe it with the configured
    speech-to-text service.

    Raises ConfigurationError when no API key is set, ValidationError for
    missing or undecodable audio, and UpstreamError for upstream failures.
    Nothing is sent upstream unless all local checks pass.
    """
    if not audio_base64:
        log.warning("No audio data provided")
        raise ValidationError("No audio data provided")

    payload, prefix_mime = strip_data_url(audio_base64)
    mime_type = mime_type or prefix_mime
    if not payload:
        raise ValidationError("No audio data provided")

    api_key = settings.OPENAI_API_KEY
    if not api_key:
        log.error("OPENAI_API_KEY is not set")
        raise ConfigurationError("OPENAI_API_KEY is not configured")

    log.info("Processing audio", extra={"mime_type": mime_type})
    audio_bytes = decode_base64_chunks(payload, settings.AUDIO_CHUNK_SIZE)
    log.info("Audio decoded", extra={"audio_bytes": len(audio_bytes)})

    files, data = build_upload(
        audio_bytes,
        mime_type,
        model=settings.TRANSCRIPTION_MODEL,
        language=settings.TRANSCRIPTION_LANGUAGE,
    )

    response = await upstream.post(
        client,
        settings.TRANSCRIPTION_URL,
        service=SERVICE,
        api_key=api_key,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
        max_retries=settings.UPSTREAM_MAX_RETRIES,
        files=files,
        data=data,
    )
    upstream.raise_for_upstream_status(
        response, service=SERVICE, label=LABEL, include_body=True
    )

    result = upstream.json_body(response, label=LABEL)
    text = result.get("text")
    text = text if isinstance(text, str) else ""
    log.info("Transcription successful", extra={"text_preview": preview(text)})
    return text
