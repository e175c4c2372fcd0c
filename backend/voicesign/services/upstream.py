"""
Outbound calls to the external AI services.

Every call goes through :func:`post`, which applies the configured timeout,
retries transport failures (never HTTP error statuses) with exponential
backoff plus jitter, and records upstream metrics.
"""

from __future__ import annotations

import asyncio
import random
from typing import Any

import httpx

from ..core.errors import UpstreamError, UpstreamTimeoutError
from ..logging_utils import get_logger
from ..metrics import track_upstream_call

log = get_logger(__name__)

INITIAL_BACKOFF_SECONDS = 0.5
MAX_BACKOFF_SECONDS = 8.0
JITTER_RANGE = 0.2
MAX_ERROR_BODY_CHARS = 500


def backoff_delay(attempt: int) -> float:
    """Delay before retry number ``attempt`` (1-based), +/- 20% jitter."""
    delay = min(INITIAL_BACKOFF_SECONDS * (2 ** (attempt - 1)), MAX_BACKOFF_SECONDS)
    return delay * (1 + random.uniform(-JITTER_RANGE, JITTER_RANGE))


async def post(
    client: httpx.AsyncClient,
    url: str,
    *,
    service: str,
    api_key: str,
    timeout: float,
    max_retries: int = 0,
    **kwargs: Any,
) -> httpx.Response:
    headers = {"Authorization": f"Bearer {api_key}", **kwargs.pop("headers", {})}
    attempt = 0
    while True:
        with track_upstream_call(service) as outcome:
            try:
                response = await client.post(url, headers=headers, timeout=timeout, **kwargs)
            except httpx.TimeoutException as exc:
                outcome["outcome"] = "timeout"
                log.error(
                    "Upstream call timed out",
                    extra={"service": service, "timeout_seconds": timeout},
                )
                raise UpstreamTimeoutError(
                    f"{service} did not respond within {timeout:g} seconds"
                ) from exc
            except httpx.TransportError as exc:
                outcome["outcome"] = "transport_error"
                if attempt >= max_retries:
                    log.error(
                        "Upstream call failed",
                        extra={"service": service, "attempts": attempt + 1, "error": str(exc)},
                    )
                    raise UpstreamError(f"{service} request failed: {exc}") from exc
                attempt += 1
                delay = backoff_delay(attempt)
                log.warning(
                    "Upstream transport error; retrying",
                    extra={"service": service, "attempt": attempt, "delay_seconds": delay},
                )
            else:
                outcome["outcome"] = "ok" if response.is_success else f"http_{response.status_code}"
                return response
        await asyncio.sleep(delay)


def raise_for_upstream_status(
    response: httpx.Response,
    *,
    service: str,
    label: str,
    include_body: bool = False,
) -> None:
    """
    Log and raise :class:`UpstreamError` for a non-2xx upstream answer.

    The caller-facing message carries only the status unless
    ``include_body`` is set, and then at most MAX_ERROR_BODY_CHARS of the body.
    """
    if response.is_success:
        return
    body = response.text
    log.error(
        f"{label} error",
        extra={"service": service, "upstream_status": response.status_code, "body": body[:2000]},
    )
    message = f"{label} error: {response.status_code}"
    if include_body:
        message = f"{message} - {body[:MAX_ERROR_BODY_CHARS]}"
    raise UpstreamError(
        message,
        upstream_status=response.status_code,
        upstream_body=body,
    )


def json_body(response: httpx.Response, *, label: str) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError as exc:
        raise UpstreamError(
            f"{label} returned a non-JSON body",
            upstream_status=response.status_code,
            upstream_body=response.text,
        ) from exc
    if not isinstance(data, dict):
        raise UpstreamError(
            f"{label} returned an unexpected JSON body",
            upstream_status=response.status_code,
            upstream_body=response.text,
        )
    return data


__all__ = ["backoff_delay", "json_body", "post", "raise_for_upstream_status"]
