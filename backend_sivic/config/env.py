"""
Environment variable loading for Sivic.

- SOLANA_RPC_URL: explicit RPC endpoint (highest priority)
- HELIUS_API_KEY / HELIUS_RPC_URL: Helius mainnet RPC (also enables DAS metadata)
- PUBLICNODE_RPC_URL: public fallback RPC endpoint
- BIRDEYE_API_KEY, JUPITER_API_KEY: optional provider keys
- OPENROUTER_API_KEY, OPENROUTER_API_KEY_2 .. _5: AI insight credential pool
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_sivic/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

HELIUS_MAINNET_BASE_URL = "https://mainnet.helius-rpc.com"
HELIUS_URL_TEMPLATE = "{base}/?api-key={key}"
PUBLICNODE_RPC_URL = "https://solana-mainnet.publicnode.com"

BIRDEYE_API_URL = "https://public-api.birdeye.so"
JUPITER_API_URL = "https://api.jup.ag"
DEXSCREENER_API_URL = "https://api.dexscreener.com"
RUGCHECK_API_URL = "https://api.rugcheck.xyz/v1"
SOLANAFM_API_URL = "https://api.solana.fm/v0"
OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"

OPENROUTER_KEY_VARS = (
    "OPENROUTER_API_KEY",
    "OPENROUTER_API_KEY_2",
    "OPENROUTER_API_KEY_3",
    "OPENROUTER_API_KEY_4",
    "OPENROUTER_API_KEY_5",
)

_TRUTHY = ("1", "true", "yes", "on")


def load_sivic_env() -> None:
    """Load .env from project root. Safe to call multiple times."""
    load_dotenv(_ENV_PATH)


def env_str(name: str, default: str = "") -> str:
    """Return a stripped env value, or default when unset or blank."""
    return (os.getenv(name) or "").strip() or default


def env_float(name: str, default: float) -> float:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_flag(name: str) -> bool:
    return env_str(name).lower() in _TRUTHY


def get_helius_api_key() -> str:
    load_sivic_env()
    return env_str("HELIUS_API_KEY")


def get_helius_rpc_url() -> str | None:
    """Helius RPC URL with key, or None when HELIUS_API_KEY is not set."""
    key = get_helius_api_key()
    if not key:
        return None
    base = env_str("HELIUS_RPC_URL", HELIUS_MAINNET_BASE_URL).rstrip("/")
    return HELIUS_URL_TEMPLATE.format(base=base, key=key)


def get_solana_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_URL > HELIUS_API_KEY > PUBLICNODE_RPC_URL > public default.
    """
    load_sivic_env()
    url = env_str("SOLANA_RPC_URL")
    if url:
        return url
    helius = get_helius_rpc_url()
    if helius:
        return helius
    return env_str("PUBLICNODE_RPC_URL", PUBLICNODE_RPC_URL)


def get_openrouter_keys() -> list[str]:
    """Configured OpenRouter keys in pool order (blank entries skipped)."""
    load_sivic_env()
    return [key for key in (env_str(name) for name in OPENROUTER_KEY_VARS) if key]


def mask_url(url: str) -> str:
    """Hide an api-key query value before logging a URL."""
    if "api-key=" in url:
        return url.split("api-key=")[0] + "api-key=***"
    return url
