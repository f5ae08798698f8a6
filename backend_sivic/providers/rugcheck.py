"""
RugCheck adapter: third-party safety score for a mint.

Score bands: >= 80 safe, >= 50 caution, below that danger.
"""

from __future__ import annotations

import httpx

from backend_sivic.providers.base import ProviderClient
from backend_sivic.providers.models import RugCheckReport, SafetyLevel, SafetyScore

SAFE_SCORE = 80.0
CAUTION_SCORE = 50.0


class RugCheckClient(ProviderClient):
    name = "rugcheck"

    def __init__(self, http: httpx.AsyncClient, base_url: str, *, timeout_sec: float = 10.0) -> None:
        super().__init__(http, base_url, timeout_sec=timeout_sec)

    async def report(self, mint: str) -> RugCheckReport | None:
        payload = await self._get_json(f"/tokens/{mint}/report")
        return self._validate(RugCheckReport, payload)

    async def safety_score(self, mint: str) -> SafetyScore | None:
        report = await self.report(mint)
        if report is None:
            return None
        return SafetyScore(
            score=report.score,
            risk_level=classify_score(report.score),
            risk_count=len(report.risks or []),
        )


def classify_score(score: float) -> SafetyLevel:
    if score >= SAFE_SCORE:
        return "safe"
    if score >= CAUTION_SCORE:
        return "caution"
    return "danger"
