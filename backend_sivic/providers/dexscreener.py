"""
DexScreener adapter: every trading pair of an address, summarized.

Public API, no key. The summary totals liquidity and 24h volume across
pairs, lists distinct venues and keeps the earliest pair creation time.
"""

from __future__ import annotations

import httpx

from backend_sivic.providers.base import ProviderClient
from backend_sivic.providers.models import DexPair, DexPairsResponse, DexSummary


class DexScreenerClient(ProviderClient):
    name = "dexscreener"

    def __init__(self, http: httpx.AsyncClient, base_url: str, *, timeout_sec: float = 10.0) -> None:
        super().__init__(http, base_url, timeout_sec=timeout_sec)

    async def token_pairs(self, address: str) -> list[DexPair]:
        payload = await self._get_json(f"/latest/dex/tokens/{address}")
        response = self._validate(DexPairsResponse, payload)
        if response is None or not response.pairs:
            return []
        return list(response.pairs)

    async def pairs(self, address: str) -> DexSummary | None:
        """Aggregated pair data, or None when the address has no pairs."""
        return summarize_pairs(await self.token_pairs(address))


def summarize_pairs(pairs: list[DexPair]) -> DexSummary | None:
    if not pairs:
        return None
    ordered = sorted(pairs, key=lambda p: p.liquidity_usd, reverse=True)
    dexes: list[str] = []
    for pair in pairs:
        if pair.dex_id not in dexes:
            dexes.append(pair.dex_id)
    created = [p.pair_created_at for p in pairs if p.pair_created_at]
    return DexSummary(
        total_pairs=len(pairs),
        total_liquidity=sum(p.liquidity_usd for p in pairs),
        total_volume_24h=sum(p.volume_24h for p in pairs),
        dexes=dexes,
        pair_created_at=min(created) if created else None,
        pairs=ordered,
    )
