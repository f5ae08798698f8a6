"""
FastAPI router: POST /api/ai/analyze, GET /api/ai/status.

Turns an already computed detection report into a short AI-written insight
through OpenRouter, rotating over the application's credential pool.
"""

from __future__ import annotations

from typing import Any

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from backend_sivic.config.settings import Settings, get_settings
from backend_sivic.providers.credentials import CredentialPool
from backend_sivic.providers.openrouter import OpenRouterClient
from backend_sivic.sivic_logging import get_logger, short_address

logger = get_logger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


class AIAnalyzeRequest(BaseModel):
    """POST /api/ai/analyze body."""

    detection_data: dict[str, Any] | None = Field(
        None,
        alias="detectionData",
        description="Final report from /api/contract/analyze or the stream's complete event",
    )


def get_credential_pool(request: Request) -> CredentialPool:
    pool = getattr(request.app.state, "credential_pool", None)
    return pool if pool is not None else CredentialPool(())


def _client(http: httpx.AsyncClient, settings: Settings, pool: CredentialPool) -> OpenRouterClient:
    return OpenRouterClient(
        http,
        settings.openrouter_api_url,
        pool,
        timeout_sec=settings.provider_timeout_sec * 2,
    )


@router.post("/analyze")
async def ai_analyze(
    body: AIAnalyzeRequest,
    settings: Settings = Depends(get_settings),
    pool: CredentialPool = Depends(get_credential_pool),
) -> dict:
    if not body.detection_data:
        raise HTTPException(status_code=400, detail="detectionData is required")
    address = str(body.detection_data.get("address", ""))
    logger.info("ai_analyze_called", address=short_address(address))
    if not pool:
        raise HTTPException(status_code=500, detail="AI analysis is not configured")
    async with httpx.AsyncClient() as http:
        insight = await _client(http, settings, pool).security_insight(body.detection_data)
    if insight is None:
        raise HTTPException(status_code=500, detail="AI analysis failed")
    return insight.to_dict()


@router.get("/status")
async def ai_status(
    settings: Settings = Depends(get_settings),
    pool: CredentialPool = Depends(get_credential_pool),
) -> dict:
    async with httpx.AsyncClient() as http:
        status = _client(http, settings, pool).status()
    count = len(status["models"])
    return {
        **status,
        "status": "ok" if status["configured"] else "unconfigured",
        "message": (
            f"OpenRouter AI ready with {count} free models"
            if status["configured"]
            else "Set OPENROUTER_API_KEY to enable AI analysis"
        ),
    }
