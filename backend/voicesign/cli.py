from __future__ import annotations

import argparse
import asyncio
import base64
import json
import mimetypes
import sys
from pathlib import Path

import httpx

from .core.errors import ProxyError
from .core.settings import get_settings
from .logging_utils import configure_logging, get_logger
from .services.summarization import summarize_text
from .services.transcription import transcribe_audio

log = get_logger(__name__)


async def _transcribe(path: Path, mime_type: str | None) -> dict:
    settings = get_settings()
    audio = base64.b64encode(path.read_bytes()).decode("ascii")
    mime_type = mime_type or mimetypes.guess_type(path.name)[0]
    async with httpx.AsyncClient() as client:
        text = await transcribe_audio(audio, mime_type, settings=settings, client=client)
    return {"text": text}


async def _summarize(text: str) -> dict:
    settings = get_settings()
    async with httpx.AsyncClient() as client:
        return await summarize_text(text, settings=settings, client=client)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="voicesign")
    sub = parser.add_subparsers(dest="command", required=True)

    p_tr = sub.add_parser("transcribe", help="Transcribe an audio file")
    p_tr.add_argument("file", type=Path)
    p_tr.add_argument("--mime-type", default=None)

    p_sum = sub.add_parser("summarize", help="Summarize text ('-' reads stdin)")
    p_sum.add_argument("text")

    args = parser.parse_args(argv)
    configure_logging("cli", "WARNING")

    try:
        if args.command == "transcribe":
            result = asyncio.run(_transcribe(args.file, args.mime_type))
        else:
            text = sys.stdin.read() if args.text == "-" else args.text
            result = asyncio.run(_summarize(text))
    except ProxyError as exc:
        print(json.dumps({"error": exc.message}, ensure_ascii=False), file=sys.stderr)
        return 1
    except OSError as exc:
        log.error("Could not read input", extra={"error": str(exc)})
        print(json.dumps({"error": str(exc)}, ensure_ascii=False), file=sys.stderr)
        return 2

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
