# voicesign/routers/health.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..core.settings import Settings, get_settings

router = APIRouter(tags=["health"])


def _credential_check(value: str | None, name: str) -> dict:
    if value:
        return {"status": "ok"}
    return {"status": "missing", "detail": f"{name} is not configured"}


@router.get("/healthz", include_in_schema=False)
def healthz(settings: Settings = Depends(get_settings)) -> dict:
    """
    Liveness plus a configuration readiness report.

    Only reports whether each upstream credential is present, never its value.
    """
    checks = {
        "transcription": _credential_check(settings.OPENAI_API_KEY, "OPENAI_API_KEY"),
        "summarization": _credential_check(settings.TYPHOON_API_KEY, "TYPHOON_API_KEY"),
    }
    overall = "ok" if all(c["status"] == "ok" for c in checks.values()) else "degraded"
    return {"status": overall, "checks": checks}
