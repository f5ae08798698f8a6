"""
Application settings and environment configuration.

Responsibilities:
- Gather every env-driven value the service needs into one frozen dataclass.
- Provide defaults for optional values (provider URLs, timeouts, retries).
- Cache the settings per process; tests reset the cache after monkeypatching env.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from pathlib import Path

from backend_sivic.config.env import (
    BIRDEYE_API_URL,
    DEXSCREENER_API_URL,
    JUPITER_API_URL,
    OPENROUTER_API_URL,
    RUGCHECK_API_URL,
    SOLANAFM_API_URL,
    env_flag,
    env_float,
    env_int,
    env_str,
    get_helius_rpc_url,
    get_openrouter_keys,
    get_solana_rpc_url,
    load_sivic_env,
    mask_url,
)


@dataclass(frozen=True)
class Settings:
    """Typed service configuration resolved from the environment."""

    solana_rpc_url: str
    helius_rpc_url: str | None = None
    birdeye_api_url: str = BIRDEYE_API_URL
    birdeye_api_key: str = ""
    jupiter_api_url: str = JUPITER_API_URL
    jupiter_api_key: str = ""
    dexscreener_api_url: str = DEXSCREENER_API_URL
    rugcheck_api_url: str = RUGCHECK_API_URL
    solanafm_api_url: str = SOLANAFM_API_URL
    openrouter_api_url: str = OPENROUTER_API_URL
    openrouter_keys: tuple[str, ...] = field(default_factory=tuple)
    enable_ai_analysis: bool = False
    provider_timeout_sec: float = 10.0
    rpc_timeout_sec: float = 15.0
    rpc_max_retries: int = 2
    known_drainers_path: Path | None = None

    @property
    def masked_rpc_url(self) -> str:
        """RPC URL with any api-key query value hidden, for logs."""
        return mask_url(self.solana_rpc_url)


def load_settings() -> Settings:
    """Build Settings from the current environment (no caching)."""
    load_sivic_env()
    drainers = env_str("KNOWN_DRAINERS_PATH")
    return Settings(
        solana_rpc_url=get_solana_rpc_url(),
        helius_rpc_url=get_helius_rpc_url(),
        birdeye_api_url=env_str("BIRDEYE_API_URL", BIRDEYE_API_URL),
        birdeye_api_key=env_str("BIRDEYE_API_KEY"),
        jupiter_api_url=env_str("JUPITER_API_URL", JUPITER_API_URL),
        jupiter_api_key=env_str("JUPITER_API_KEY"),
        dexscreener_api_url=env_str("DEXSCREENER_API_URL", DEXSCREENER_API_URL),
        rugcheck_api_url=env_str("RUGCHECK_API_URL", RUGCHECK_API_URL),
        solanafm_api_url=env_str("SOLANAFM_API_URL", SOLANAFM_API_URL),
        openrouter_api_url=env_str("OPENROUTER_API_URL", OPENROUTER_API_URL),
        openrouter_keys=tuple(get_openrouter_keys()),
        enable_ai_analysis=env_flag("ENABLE_AI_ANALYSIS"),
        provider_timeout_sec=env_float("PROVIDER_TIMEOUT_SEC", 10.0),
        rpc_timeout_sec=env_float("RPC_TIMEOUT_SEC", 15.0),
        rpc_max_retries=max(1, env_int("RPC_MAX_RETRIES", 2)),
        known_drainers_path=Path(drainers) if drainers else None,
    )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings.

    Returns:
        Settings object with solana_rpc_url, provider URLs and keys,
        timeouts and the AI credential list.
    """
    return load_settings()


def reset_settings_cache() -> None:
    """Drop the cached Settings so the next get_settings() re-reads env."""
    get_settings.cache_clear()
