from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .core.errors import (
    ProxyError,
    generic_exception_handler,
    http_exception_handler,
    proxy_error_handler,
    validation_exception_handler,
)
from .core.settings import get_settings
from .logging_utils import bind_request_context, configure_logging, get_logger
from .metrics import CONTENT_TYPE_LATEST, render_all_metrics_prometheus, track_http_request
from .routers import health, summarize, transcribe

CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"

# Configure structured logging for the API once at startup
configure_logging("api", get_settings().LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    async with httpx.AsyncClient(timeout=settings.UPSTREAM_TIMEOUT_SECONDS) as client:
        app.state.http_client = client
        logger.info("upstream http client ready", extra={"app_env": settings.APP_ENV})
        yield


app = FastAPI(title="VoiceSign API", version=__version__, lifespan=lifespan)

app.add_exception_handler(ProxyError, proxy_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)


def cors_headers() -> dict[str, str]:
    # Middleware cannot use Depends, so honour dependency overrides by hand.
    settings = app.dependency_overrides.get(get_settings, get_settings)()
    return {
        "Access-Control-Allow-Origin": settings.CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }


# ---------------------------------------------------------------------------
# Observability + CORS middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def observability_middleware(request: Request, call_next):
    """
    Attach a request_id to logs, track HTTP metrics, answer CORS pre-flight
    requests and add CORS headers to every response.
    """
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    bind_request_context(request_id)

    status_holder: dict[str, int] = {"status": 500}
    path = request.url.path
    method = request.method

    with track_http_request(path, method, lambda: status_holder["status"]):
        if method == "OPTIONS":
            response = Response(status_code=200)
        else:
            try:
                response = await call_next(request)
            except Exception as exc:
                response = await generic_exception_handler(request, exc)
        status_holder["status"] = response.status_code

    response.headers.update(cors_headers())
    response.headers["x-request-id"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/metrics-prom", include_in_schema=False)
def metrics_prometheus() -> Response:
    """Prometheus text-format metrics for scraping and debugging."""
    return Response(content=render_all_metrics_prometheus(), media_type=CONTENT_TYPE_LATEST)


app.include_router(health.router)
app.include_router(transcribe.router)
app.include_router(summarize.router)
