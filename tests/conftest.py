"""
Pytest fixtures for Sivic tests.

Collaborators are AsyncMock-backed fakes that default to "no data" (None or
empty); individual tests set return values or side effects per adapter.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from backend_sivic.config.env import OPENROUTER_KEY_VARS
from backend_sivic.config.settings import reset_settings_cache
from backend_sivic.providers import Collaborators
from backend_sivic.solana_rpc.models import UPGRADEABLE_LOADER_ID, AccountInfo

VALID_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
RAYDIUM_AMM = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"
UNKNOWN_PROGRAM = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
AUTHORITY = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
PROGRAM_DATA = "4MangoMjqJ2firMokCjjGgoK8d4MXcrgL7XJaL3w6fVg"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


def build_mint_account(
    address: str = VALID_MINT,
    *,
    mint_authority: str | None = None,
    freeze_authority: str | None = None,
    supply: str = "1000000000000",
    decimals: int = 6,
) -> AccountInfo:
    """Parsed mint account as getAccountInfo (jsonParsed) returns it."""
    return AccountInfo.from_rpc_value(
        address,
        {
            "owner": TOKEN_PROGRAM_ID,
            "executable": False,
            "lamports": 1461600,
            "data": {
                "program": "spl-token",
                "parsed": {
                    "type": "mint",
                    "info": {
                        "decimals": decimals,
                        "supply": supply,
                        "mintAuthority": mint_authority,
                        "freezeAuthority": freeze_authority,
                        "isInitialized": True,
                    },
                },
            },
        },
    )


def build_program_account(address: str = RAYDIUM_AMM, program_data: str | None = PROGRAM_DATA) -> AccountInfo:
    """Executable account owned by the upgradeable loader."""
    info = {"programData": program_data} if program_data else {}
    return AccountInfo.from_rpc_value(
        address,
        {
            "owner": UPGRADEABLE_LOADER_ID,
            "executable": True,
            "lamports": 1141440,
            "data": {"parsed": {"type": "program", "info": info}},
        },
    )


def build_collaborators() -> Collaborators:
    """Every adapter returns an absent result until a test says otherwise."""
    rpc = MagicMock()
    rpc.get_account_info = AsyncMock(return_value=None)
    rpc.get_program_data = AsyncMock(return_value=None)
    rpc.get_token_largest_accounts = AsyncMock(return_value=[])
    rpc.get_signatures_for_address = AsyncMock(return_value=[])

    market = MagicMock()
    market.overview = AsyncMock(return_value=None)
    market.security = AsyncMock(return_value=None)

    dex = MagicMock()
    dex.pairs = AsyncMock(return_value=None)

    swap = MagicMock()
    swap.slippage = AsyncMock(return_value=None)

    reputation = MagicMock()
    reputation.safety_score = AsyncMock(return_value=None)
    reputation.holder_distribution = AsyncMock(return_value=None)
    reputation.transfer_anomalies = AsyncMock(return_value=None)
    reputation.is_known_drainer = MagicMock(return_value=False)

    metadata = MagicMock()
    metadata.token_metadata = AsyncMock(return_value=None)

    return Collaborators(
        rpc=rpc,
        market=market,
        dex=dex,
        swap=swap,
        reputation=reputation,
        metadata=metadata,
        ai=None,
    )


@pytest.fixture
def collaborators() -> Collaborators:
    return build_collaborators()


@pytest.fixture
def mint_account_factory():
    return build_mint_account


@pytest.fixture
def program_account_factory():
    return build_program_account


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate each test from a developer .env and the settings cache."""
    for name in ("ENABLE_AI_ANALYSIS", "BIRDEYE_API_KEY", "HELIUS_API_KEY", *OPENROUTER_KEY_VARS):
        monkeypatch.setenv(name, "")
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def client(collaborators):
    """FastAPI TestClient whose routes use the in-memory collaborators."""
    from fastapi.testclient import TestClient

    from backend_sivic.api_server.routes import get_collaborator_factory
    from backend_sivic.api_server.server import app

    app.dependency_overrides[get_collaborator_factory] = lambda: (lambda http: collaborators)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
