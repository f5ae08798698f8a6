"""
Helius DAS adapter: token name, symbol and image via getAsset.

Only available with a Helius RPC URL (HELIUS_API_KEY); otherwise returns None.
"""

from __future__ import annotations

import re
from typing import Any

import httpx

from backend_sivic.core.exceptions import ProviderError
from backend_sivic.providers.base import ProviderClient
from backend_sivic.providers.models import TokenMetadata
from backend_sivic.sivic_logging import get_logger, short_address

logger = get_logger(__name__)

_IMAGE_EXT = re.compile(r"\.(png|jpg|jpeg|gif|webp|svg)$", re.IGNORECASE)


class HeliusDasClient(ProviderClient):
    name = "helius_das"

    def __init__(self, http: httpx.AsyncClient, rpc_url: str | None, *, timeout_sec: float = 10.0) -> None:
        super().__init__(http, rpc_url or "", timeout_sec=timeout_sec)
        self._enabled = bool(rpc_url)

    @property
    def configured(self) -> bool:
        return self._enabled

    def _url(self, path: str) -> str:
        # DAS is JSON-RPC on the RPC URL itself; the api-key lives in its query string
        return self._base_url

    async def token_metadata(self, mint: str) -> TokenMetadata | None:
        if not self._enabled:
            return None
        body = {"jsonrpc": "2.0", "id": "get-asset", "method": "getAsset", "params": {"id": mint}}
        try:
            payload = await self._fetch("POST", "", json=body)
        except ProviderError as e:
            logger.warning("provider_request_failed", provider=self.name, address=short_address(mint), error=e.message)
            return None
        asset = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(asset, dict):
            return None
        return parse_asset(asset)


def parse_asset(asset: dict[str, Any]) -> TokenMetadata:
    content = asset.get("content") or {}
    metadata = content.get("metadata") or {}
    name = (metadata.get("name") or asset.get("name") or "").strip() or "Unknown"
    symbol = (metadata.get("symbol") or asset.get("symbol") or "").strip() or "UNKNOWN"

    image: str | None = None
    for f in content.get("files") or []:
        uri = f.get("uri") or ""
        if (f.get("mime") or "").startswith("image/") or _IMAGE_EXT.search(uri):
            image = uri or None
            break
    if image is None:
        image = (content.get("links") or {}).get("image") or metadata.get("image") or None
    return TokenMetadata(name=name, symbol=symbol, image_url=image)
