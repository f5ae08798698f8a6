"""
SolanaFM adapter: holder distribution and transfer-pattern anomalies.

Holder concentration classes (percent of supply):
- critical: top holder > 50
- high: top holder > 25 or top 5 > 70
- medium: top holder > 10 or top 5 > 50
- low: otherwise

Transfer anomalies over the most recent transfers:
- funneling: more than 10 distinct senders into fewer than 3 receivers
- single receiver taking more than half of all transfers
- more than 20% failed transfers once there are more than 10 transfers
"""

from __future__ import annotations

from collections import Counter
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from backend_sivic.providers.base import ProviderClient
from backend_sivic.providers.models import (
    ConcentrationRisk,
    HolderDistribution,
    SolanaFMHolder,
    SolanaFMTransfer,
    TransferAnomalies,
)
from backend_sivic.sivic_logging import get_logger

logger = get_logger(__name__)

HOLDER_LIMIT = 20
TRANSFER_LIMIT = 100
LARGE_TRANSFER_BASE_UNITS = 1e9

_HOLDERS = TypeAdapter(list[SolanaFMHolder])
_TRANSFERS = TypeAdapter(list[SolanaFMTransfer])


class SolanaFMClient(ProviderClient):
    name = "solanafm"

    def __init__(self, http: httpx.AsyncClient, base_url: str, *, timeout_sec: float = 10.0) -> None:
        super().__init__(http, base_url, timeout_sec=timeout_sec)

    async def holders(self, mint: str, limit: int = HOLDER_LIMIT) -> list[SolanaFMHolder]:
        payload = await self._get_json(f"/tokens/{mint}/holders", params={"limit": limit})
        return self._validate_list(_HOLDERS, payload)

    async def transfers(self, mint: str, limit: int = TRANSFER_LIMIT) -> list[SolanaFMTransfer]:
        payload = await self._get_json(f"/tokens/{mint}/transfers", params={"limit": limit})
        return self._validate_list(_TRANSFERS, payload)

    async def holder_distribution(self, mint: str) -> HolderDistribution | None:
        """Concentration summary, or None when no holder data is available."""
        holders = await self.holders(mint)
        if not holders:
            return None
        return summarize_holders(holders)

    async def transfer_anomalies(self, mint: str) -> TransferAnomalies | None:
        transfers = await self.transfers(mint)
        if not transfers:
            return None
        return detect_transfer_anomalies(transfers)

    def _validate_list(self, adapter: TypeAdapter, payload: Any) -> list:
        result = payload.get("result") if isinstance(payload, dict) else None
        if not result:
            return []
        try:
            return adapter.validate_python(result)
        except ValidationError as e:
            logger.warning("provider_schema_mismatch", provider=self.name, errors=e.error_count())
            return []


def classify_concentration(top_holder: float, top5: float) -> ConcentrationRisk:
    if top_holder > 50:
        return "critical"
    if top_holder > 25 or top5 > 70:
        return "high"
    if top_holder > 10 or top5 > 50:
        return "medium"
    return "low"


def summarize_holders(holders: list[SolanaFMHolder]) -> HolderDistribution:
    top = holders[0].percentage if holders else 0.0
    top5 = sum(h.percentage for h in holders[:5])
    top10 = sum(h.percentage for h in holders[:10])
    return HolderDistribution(
        top_holder_percent=top,
        top5_holders_percent=top5,
        top10_holders_percent=top10,
        holder_count=len(holders),
        concentration_risk=classify_concentration(top, top5),
    )


def detect_transfer_anomalies(transfers: list[SolanaFMTransfer]) -> TransferAnomalies:
    senders = {t.source for t in transfers if t.source}
    receivers = Counter(t.destination for t in transfers if t.destination)
    failed = sum(1 for t in transfers if not t.success)
    large = 0
    for t in transfers:
        try:
            if t.amount is not None and float(t.amount) > LARGE_TRANSFER_BASE_UNITS:
                large += 1
        except ValueError:
            continue

    patterns: list[str] = []
    if len(senders) > 10 and len(receivers) < 3:
        patterns.append("Funneling pattern: Many senders to few receivers")
    if receivers and max(receivers.values()) > len(transfers) * 0.5:
        patterns.append("Single receiver dominance: >50% of transfers to one address")
    if len(transfers) > 10 and failed / len(transfers) > 0.2:
        patterns.append("High transfer failure rate: >20% failed")

    return TransferAnomalies(
        recent_transfer_count=len(transfers),
        unique_senders=len(senders),
        unique_receivers=len(receivers),
        failed_transfers=failed,
        large_transfers=large,
        suspicious_patterns=patterns,
    )
