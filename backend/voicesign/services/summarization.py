from __future__ import annotations

import json
from typing import Any

import httpx

from ..core.errors import ConfigurationError, ParseError, UpstreamError, ValidationError
from ..core.settings import Settings
from ..logging_utils import get_logger, preview
from . import upstream

log = get_logger(__name__)

SERVICE = "summarization"
LABEL = "TYPHOON API"
MAX_KEYWORDS = 5

SYSTEM_PROMPT = """คุณเป็นผู้ช่วยย่อข้อความภาษาไทย ให้ทำงานดังนี้:
1. ย่อข้อความให้สั้นลง โดยใช้เฉพาะคำที่มีอยู่ในข้อความต้นฉบับเท่านั้น ห้ามสร้างคำใหม่ ห้ามแปลความหมาย ห้ามเปลี่ยนคำ
2. ตัดเฉพาะคำฟุ่มเฟือยหรือคำซ้ำออก แต่ต้องคงคำหลักและความหมายเดิมไว้ทั้งหมด
3. ดึงคำสำคัญ (Keywords) ที่ปรากฏอยู่ในข้อความต้นฉบับออกมา 3-5 คำ (ห้ามสร้างคำใหม่)

ตอบในรูปแบบ JSON เท่านั้น:
{
  "summary": "ข้อความที่ย่อแล้ว โดยใช้คำจากต้นฉบับเท่านั้น",
  "keywords": ["คำสำคัญ1", "คำสำคัญ2", "คำสำคัญ3"]
}"""

USER_INSTRUCTION = (
    "ย่อข้อความนี้ให้สั้นลง โดยใช้เฉพาะคำที่มีในข้อความต้นฉบับเท่านั้น "
    "ห้ามแปลหรือสร้างคำใหม่ แล้วดึงคำสำคัญที่มีในข้อความออกมา:"
)

_decoder = json.JSONDecoder()


def build_messages(text: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": f"{USER_INSTRUCTION}\n\n{text}"},
    ]


def build_payload(text: str, settings: Settings) -> dict[str, Any]:
    return {
        "model": settings.SUMMARIZE_MODEL,
        "messages": build_messages(text),
        "max_tokens": settings.SUMMARIZE_MAX_TOKENS,
        "temperature": settings.SUMMARIZE_TEMPERATURE,
    }


def extract_json_object(reply: str) -> dict[str, Any]:
    """
    Return the first well-formed JSON object embedded in ``reply``.

    Each ``{`` is tried in turn as the start of an object; the decoder stops
    at the matching close brace, so prose (or a second object) after it is
    never swallowed. Raises ParseError when no candidate decodes to a dict.
    """
    pos = reply.find("{")
    while pos != -1:
        try:
            obj, _ = _decoder.raw_decode(reply, pos)
        except ValueError:
            obj = None
        if isinstance(obj, dict):
            return obj
        pos = reply.find("{", pos + 1)
    raise ParseError("No JSON object found in model reply")


def _clean_keywords(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    keywords: list[str] = []
    for item in raw:
        if isinstance(item, bool) or not isinstance(item, (str, int, float)):
            continue
        word = item if isinstance(item, str) else str(item)
        if not word.strip():
            continue
        keywords.append(word)
        if len(keywords) == MAX_KEYWORDS:
            break
    return keywords


def parse_reply(reply: str, fallback_chars: int = 200) -> dict[str, Any]:
    """
    Turn the model's reply into ``{"summary", "keywords"}``.

    Replies without a usable JSON object degrade to the first
    ``fallback_chars`` characters as the summary and no keywords.
    """
    try:
        parsed = extract_json_object(reply)
    except ParseError:
        log.warning(
            "Failed to parse model reply as JSON; using raw text",
            extra={"reply_preview": preview(reply)},
        )
        return {"summary": reply[:fallback_chars], "keywords": []}

    summary = parsed.get("summary")
    return {
        "summary": summary if isinstance(summary, str) else "",
        "keywords": _clean_keywords(parsed.get("keywords")),
    }


def _completion_content(data: dict[str, Any]) -> str | None:
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) and content else None


async def summarize_text(
    text: str | None,
    *,
    settings: Settings,
    client: httpx.AsyncClient,
) -> dict[str, Any]:
    """Summarize ``text`` and extract keywords with the configured chat model."""
    if not text or not text.strip():
        log.warning("No text provided")
        raise ValidationError("No text provided")

    api_key = settings.TYPHOON_API_KEY
    if not api_key:
        log.error("TYPHOON_API_KEY is not set")
        raise ConfigurationError("TYPHOON_API_KEY is not configured")

    log.info("Processing text for summarization", extra={"text_length": len(text)})

    response = await upstream.post(
        client,
        settings.SUMMARIZE_URL,
        service=SERVICE,
        api_key=api_key,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
        max_retries=settings.UPSTREAM_MAX_RETRIES,
        json=build_payload(text, settings),
    )
    upstream.raise_for_upstream_status(response, service=SERVICE, label=LABEL)

    data = upstream.json_body(response, label=LABEL)
    content = _completion_content(data)
    if content is None:
        raise UpstreamError(
            f"No content in {LABEL} response",
            upstream_status=response.status_code,
            upstream_body=response.text,
        )
    log.info("Model reply received", extra={"reply_preview": preview(content)})

    result = parse_reply(content, settings.SUMMARY_FALLBACK_CHARS)
    return {**result, "originalText": text}
