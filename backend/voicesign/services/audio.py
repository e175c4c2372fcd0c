from __future__ import annotations

import base64
import binascii
import re

from ..core.errors import ValidationError

DEFAULT_CHUNK_SIZE = 32768
DEFAULT_EXTENSION = "webm"
DEFAULT_MIME_TYPE = "audio/webm"

# First match wins, so "audio/mpeg" never falls through to the mp4 rule.
_EXTENSION_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("mp3", "mpeg"), "mp3"),
    (("wav",), "wav"),
    (("m4a", "mp4"), "m4a"),
    (("ogg",), "ogg"),
)

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?:;[^,]*)?;base64,", re.IGNORECASE)


def strip_data_url(data: str) -> tuple[str, str | None]:
    """
    Accept both bare base64 and ``data:<mime>;base64,<payload>`` strings
    (what ``FileReader.readAsDataURL`` produces in the browser).

    Returns ``(payload, mime_type_from_prefix)``.
    """
    m = _DATA_URL_RE.match(data)
    if m is None:
        return data, None
    return data[m.end():], (m.group("mime") or None)


def decode_base64_chunks(data: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """
    Decode ``data`` ``chunk_size`` characters at a time into one buffer.

    ``chunk_size`` must be a multiple of 4 so every slice ends on a base64
    quantum boundary; the output is then identical for any chunk size.
    Missing trailing ``=`` padding is tolerated, as browsers' ``atob`` does.
    """
    if chunk_size <= 0 or chunk_size % 4:
        raise ValueError(f"chunk_size must be a positive multiple of 4, got {chunk_size}")

    # Only the final chunk can be short of a full quantum.
    remainder = len(data) % 4
    if remainder == 1:
        raise ValidationError("Audio data is not valid base64")

    out = bytearray()
    for pos in range(0, len(data), chunk_size):
        chunk = data[pos:pos + chunk_size]
        if remainder and pos + chunk_size >= len(data):
            chunk += "=" * (4 - remainder)
        try:
            out += base64.b64decode(chunk, validate=True)
        except binascii.Error as exc:
            raise ValidationError("Audio data is not valid base64") from exc
    return bytes(out)


def extension_for_mime(mime_type: str | None) -> str:
    """Map a MIME type hint to the file extension the upstream API expects."""
    if not mime_type:
        return DEFAULT_EXTENSION
    lowered = mime_type.lower()
    for needles, ext in _EXTENSION_RULES:
        if any(n in lowered for n in needles):
            return ext
    return DEFAULT_EXTENSION


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_EXTENSION",
    "DEFAULT_MIME_TYPE",
    "decode_base64_chunks",
    "extension_for_mime",
    "strip_data_url",
]
