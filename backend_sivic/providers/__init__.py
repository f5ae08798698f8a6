"""
Data-provider adapters consumed by the detectors.

Collaborators bundles one instance of every adapter for a single analysis
run. build_collaborators wires them from Settings over one shared
httpx.AsyncClient; tests substitute in-memory fakes with the same methods.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from backend_sivic.config.settings import Settings
from backend_sivic.providers.birdeye import BirdeyeClient
from backend_sivic.providers.credentials import CredentialPool
from backend_sivic.providers.dexscreener import DexScreenerClient
from backend_sivic.providers.helius_das import HeliusDasClient
from backend_sivic.providers.jupiter import JupiterClient
from backend_sivic.providers.openrouter import OpenRouterClient
from backend_sivic.providers.reputation import ReputationProvider, load_known_drainers
from backend_sivic.providers.rugcheck import RugCheckClient
from backend_sivic.providers.solanafm import SolanaFMClient
from backend_sivic.solana_rpc.client import SolanaRpcClient


@dataclass
class Collaborators:
    """Everything one analysis run may call out to."""

    rpc: SolanaRpcClient
    market: BirdeyeClient
    dex: DexScreenerClient
    swap: JupiterClient
    reputation: ReputationProvider
    metadata: HeliusDasClient
    ai: OpenRouterClient | None = None


def build_collaborators(
    settings: Settings,
    http: httpx.AsyncClient,
    pool: CredentialPool | None = None,
) -> Collaborators:
    timeout = settings.provider_timeout_sec
    ai = None
    if pool:
        ai = OpenRouterClient(http, settings.openrouter_api_url, pool, timeout_sec=timeout * 2)
    return Collaborators(
        rpc=SolanaRpcClient(http, settings.solana_rpc_url, max_retries=settings.rpc_max_retries),
        market=BirdeyeClient(http, settings.birdeye_api_url, settings.birdeye_api_key, timeout_sec=timeout),
        dex=DexScreenerClient(http, settings.dexscreener_api_url, timeout_sec=timeout),
        swap=JupiterClient(http, settings.jupiter_api_url, settings.jupiter_api_key, timeout_sec=timeout),
        reputation=ReputationProvider(
            RugCheckClient(http, settings.rugcheck_api_url, timeout_sec=timeout),
            SolanaFMClient(http, settings.solanafm_api_url, timeout_sec=timeout),
            load_known_drainers(settings.known_drainers_path),
        ),
        metadata=HeliusDasClient(http, settings.helius_rpc_url, timeout_sec=timeout),
        ai=ai,
    )


__all__ = [
    "Collaborators",
    "CredentialPool",
    "build_collaborators",
]
