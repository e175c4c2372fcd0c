from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends

from ..core.settings import Settings, get_settings
from ..deps import get_http_client
from ..schemas import SummarizationRequest, SummarizationResponse
from ..services import summarization

router = APIRouter(prefix="/v1", tags=["summarization"])


@router.post("/summarize-text", response_model=SummarizationResponse)
async def summarize_text(
    body: SummarizationRequest,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> SummarizationResponse:
    """
    Summarize Thai text and pull out keywords.

    Always answers with ``summary``, ``keywords`` and ``originalText``;
    an unparseable model reply still yields a best-effort summary.
    """
    result = await summarization.summarize_text(body.text, settings=settings, client=client)
    return SummarizationResponse(**result)
