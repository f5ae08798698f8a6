"""
FastAPI router: GET /api/contract/analyze-stream, GET /api/contract/analyze.

Both run the streaming coordinator for one address. The stream variant
relays every StepEvent as one NDJSON line; the plain variant returns only
the final report. Malformed addresses are rejected with 400 before any
collaborator is called.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from backend_sivic.analytics.classifier import validate_address
from backend_sivic.api_server.stream import analyze_once, analyze_stream
from backend_sivic.config.settings import Settings, get_settings
from backend_sivic.core.exceptions import InvalidAddressError
from backend_sivic.providers import Collaborators, build_collaborators
from backend_sivic.sivic_logging import get_logger, short_address

logger = get_logger(__name__)

router = APIRouter(prefix="/api/contract", tags=["contract"])

NDJSON_MEDIA_TYPE = "application/x-ndjson"

CollaboratorFactory = Callable[[httpx.AsyncClient], Collaborators]


def get_collaborator_factory(request: Request) -> CollaboratorFactory:
    """Dependency: builds the adapters for one request over its HTTP client."""
    settings = get_settings()
    pool = getattr(request.app.state, "credential_pool", None)

    def factory(http: httpx.AsyncClient) -> Collaborators:
        return build_collaborators(settings, http, pool)

    return factory


def _validated(address: str | None) -> str:
    try:
        return validate_address(address)
    except InvalidAddressError as e:
        logger.info("analyze_invalid_address", address=(address or "")[:16])
        raise HTTPException(status_code=400, detail=e.message) from e


@router.get("/analyze-stream")
async def analyze_stream_route(
    request: Request,
    address: str | None = Query(None, description="Token mint or program address (base58)"),
    settings: Settings = Depends(get_settings),
    factory: CollaboratorFactory = Depends(get_collaborator_factory),
) -> StreamingResponse:
    """Stream step events for one analysis as newline-delimited JSON."""
    addr = _validated(address)
    logger.info("analyze_stream_called", address=short_address(addr))

    async def body() -> AsyncIterator[str]:
        async with httpx.AsyncClient(timeout=httpx.Timeout(settings.rpc_timeout_sec)) as http:
            events = analyze_stream(
                addr,
                factory(http),
                enable_ai=settings.enable_ai_analysis,
                is_disconnected=request.is_disconnected,
            )
            async for event in events:
                yield event.to_json_line()

    return StreamingResponse(
        body(),
        media_type=NDJSON_MEDIA_TYPE,
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/analyze")
async def analyze_route(
    address: str | None = Query(None, description="Token mint or program address (base58)"),
    settings: Settings = Depends(get_settings),
    factory: CollaboratorFactory = Depends(get_collaborator_factory),
) -> dict:
    """
    Run the same analysis and return only the final report.

    404 when the account does not exist; 502 when the lookup itself failed.
    """
    addr = _validated(address)
    logger.info("analyze_called", address=short_address(addr))
    async with httpx.AsyncClient(timeout=httpx.Timeout(settings.rpc_timeout_sec)) as http:
        report = await analyze_once(addr, factory(http), enable_ai=settings.enable_ai_analysis)
    if "error" in report:
        status = 404 if report["error"] == "Account not found" else 502
        raise HTTPException(status_code=status, detail=report["error"])
    return report
