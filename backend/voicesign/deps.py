# backend/voicesign/deps.py
from __future__ import annotations

import httpx
from fastapi import Request


def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Shared outbound client created in the app lifespan.
    Tests override this dependency with an ``httpx.MockTransport`` client.
    """
    return request.app.state.http_client


__all__ = ["get_http_client"]
