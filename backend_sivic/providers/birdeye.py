"""
Birdeye adapter: market overview and token security for a mint.

Both endpoints need BIRDEYE_API_KEY; without it the adapter returns None
immediately so detectors mark the step's parameters checked but unknown.
"""

from __future__ import annotations

import httpx

from backend_sivic.providers.base import ProviderClient
from backend_sivic.providers.models import TokenOverview, TokenSecurity
from backend_sivic.sivic_logging import get_logger, short_address

logger = get_logger(__name__)


class BirdeyeClient(ProviderClient):
    name = "birdeye"

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        *,
        timeout_sec: float = 10.0,
    ) -> None:
        super().__init__(
            http,
            base_url,
            headers={"X-API-KEY": api_key, "x-chain": "solana"},
            timeout_sec=timeout_sec,
        )
        self._api_key = api_key

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def overview(self, address: str) -> TokenOverview | None:
        """Price, market cap, liquidity, holder count, 24h change and volume."""
        if not self.configured:
            logger.debug("birdeye_skipped_no_key", address=short_address(address))
            return None
        payload = await self._get_json("/defi/token_overview", params={"address": address})
        return self._validate(TokenOverview, _data(payload))

    async def security(self, address: str) -> TokenSecurity | None:
        """Creator share, LP burn status and top-10 holder share."""
        if not self.configured:
            return None
        payload = await self._get_json("/defi/token_security", params={"address": address})
        return self._validate(TokenSecurity, _data(payload))


def _data(payload: object) -> object | None:
    """Birdeye wraps results as {"success": bool, "data": {...}}."""
    if isinstance(payload, dict):
        return payload.get("data") or None
    return None
