"""
OpenRouter adapter: short AI-written security insight for a finished report.

Responsibilities:
- Reduce a detection report to a minimal JSON context (no raw provider data).
- Try each free model with the next pooled key, then the backup keys with
  the fastest models.
- Extract and validate a JSON object from the reply; None when every attempt fails.
"""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any

import httpx
from pydantic import ValidationError

from backend_sivic.providers.credentials import CredentialPool
from backend_sivic.providers.models import AIAnalysis
from backend_sivic.sivic_logging import get_logger

logger = get_logger(__name__)

FREE_MODELS = (
    "google/gemma-3-27b-it:free",
    "mistralai/mistral-nemo:free",
    "openrouter/pony-alpha",
)
BACKUP_MODEL_COUNT = 3
RETRY_PAUSE_SEC = 0.1

SYSTEM_PROMPT = (
    "Solana security analyst. Return only JSON:\n"
    '{"summary":"2 short sentences","riskAssessment":"1 sentence",'
    '"keyFindings":["f1","f2","f3"],"recommendations":["r1","r2","r3"]}'
)

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def minimal_context(report: dict[str, Any]) -> str:
    """Compact JSON describing a report for the model prompt."""
    security = report.get("securityData") or {}
    market = report.get("marketOverview") or {}
    score = report.get("riskScore") or {}
    address = str(report.get("address") or "")
    context = {
        "addr": address[:12] + "...",
        "type": report.get("type") or report.get("detectionMode") or "token",
        "risk": score.get("score", 0),
        "grade": score.get("grade", "N/A"),
        "flags": {
            "mintAuth": "enabled" if security.get("isMintable") else "disabled",
            "freezeAuth": "enabled" if security.get("isFreezable") else "disabled",
        },
        "market": {
            "price": market.get("price") or 0,
            "mcap": market.get("marketCap") or 0,
            "liq": market.get("liquidity") or 0,
        },
        "indicators": [i.get("id") for i in report.get("riskIndicators") or []][:10],
    }
    return json.dumps(context, separators=(",", ":"))


def parse_reply(text: str) -> AIAnalysis | None:
    fenced = _CODE_FENCE.search(text)
    if fenced:
        text = fenced.group(1)
    match = _JSON_OBJECT.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
        analysis = AIAnalysis.model_validate(parsed)
    except (ValueError, ValidationError):
        return None
    if not analysis.summary or not analysis.key_findings:
        return None
    return analysis


class OpenRouterClient:
    name = "openrouter"

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_url: str,
        pool: CredentialPool,
        *,
        timeout_sec: float = 20.0,
        models: tuple[str, ...] = FREE_MODELS,
    ) -> None:
        self._http = http
        self._api_url = api_url
        self._pool = pool
        self._timeout = httpx.Timeout(timeout_sec)
        self._models = models

    @property
    def configured(self) -> bool:
        return bool(self._pool)

    def status(self) -> dict[str, Any]:
        return {
            "configured": self.configured,
            "provider": "OpenRouter",
            "keyCount": len(self._pool),
            "models": list(self._models),
        }

    async def _generate(self, api_key: str, model: str, context: str) -> AIAnalysis | None:
        body: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Analyze this Solana token: {context}"},
            ],
            "max_tokens": 300,
            "temperature": 0.1,
        }
        if "pony-alpha" in model:
            body["reasoning"] = {"enabled": True}
        try:
            resp = await self._http.post(
                self._api_url,
                json=body,
                headers={"Authorization": f"Bearer {api_key}"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("openrouter_request_failed", model=model, error=repr(e))
            return None
        if resp.status_code != 200:
            logger.warning("openrouter_http_error", model=model, status=resp.status_code)
            return None
        try:
            data = resp.json()
        except ValueError:
            return None
        if not isinstance(data, dict):
            logger.warning("openrouter_unexpected_body", model=model, body_type=type(data).__name__)
            return None
        if data.get("error"):
            logger.warning("openrouter_api_error", model=model, error=str(data["error"]))
            return None
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None
        return parse_reply(text or "")

    async def security_insight(self, report: dict[str, Any]) -> AIAnalysis | None:
        if not self.configured:
            logger.info("openrouter_unconfigured")
            return None
        context = minimal_context(report)
        for model in self._models:
            api_key = self._pool.next()
            if api_key is None:
                break
            result = await self._generate(api_key, model, context)
            if result is not None:
                logger.info("openrouter_success", model=model)
                return result
            await asyncio.sleep(RETRY_PAUSE_SEC)

        for index, backup in enumerate(self._pool.backups(), start=1):
            for model in self._models[:BACKUP_MODEL_COUNT]:
                logger.info("openrouter_backup_attempt", key_index=index, model=model)
                result = await self._generate(backup, model, context)
                if result is not None:
                    return result

        logger.error("openrouter_exhausted")
        return None
