"""
FastAPI server: address risk detection over HTTP.

Exposes the streaming analysis (NDJSON), the one-shot analysis, the AI
insight endpoints and a liveness probe. The lifespan owns the process-wide
OpenRouter credential pool; every request builds its own collaborators.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend_sivic import __version__
from backend_sivic.api_server.ai_insight import router as ai_router
from backend_sivic.api_server.routes import router as contract_router
from backend_sivic.config.settings import get_settings
from backend_sivic.providers.credentials import CredentialPool
from backend_sivic.sivic_logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the credential pool once per application; log config summary."""
    settings = get_settings()
    app.state.credential_pool = CredentialPool(settings.openrouter_keys)
    logger.info(
        "api_started",
        rpc_url=settings.masked_rpc_url,
        birdeye_configured=bool(settings.birdeye_api_key),
        helius_configured=settings.helius_rpc_url is not None,
        ai_keys=len(app.state.credential_pool),
        ai_enabled=settings.enable_ai_analysis,
    )
    yield
    logger.info("api_stopped")


app = FastAPI(
    title="Backend Sivic API",
    description="Solana token and program risk detection with streamed step events.",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(contract_router)
app.include_router(ai_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: API is up."""
    return {"status": "ok"}
