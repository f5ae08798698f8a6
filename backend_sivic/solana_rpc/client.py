"""
Solana JSON-RPC client: account, holder and signature lookups.

Responsibilities:
- Issue JSON-RPC calls over a caller-owned httpx.AsyncClient.
- Retry transport failures with exponential backoff.
- Normalize results into solana_rpc.models dataclasses.
- Raise RpcError on transport, JSON-RPC or payload-shape errors; detectors
  treat that as a step-local failure.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any

import httpx

from backend_sivic.config.env import mask_url
from backend_sivic.core.exceptions import RpcError
from backend_sivic.sivic_logging import get_logger, short_address
from backend_sivic.solana_rpc.models import (
    AccountInfo,
    ProgramDataInfo,
    SignatureInfo,
    TokenAccountBalance,
)

logger = get_logger(__name__)


class SolanaRpcClient:
    """
    Thin async wrapper over the Solana JSON-RPC methods the detectors need.

    One instance per analysis run; the httpx client is owned by the caller
    so connection pooling and timeouts are configured in one place.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        rpc_url: str,
        *,
        max_retries: int = 2,
        min_retry_delay_sec: float = 0.5,
        max_retry_delay_sec: float = 4.0,
    ) -> None:
        """
        Args:
            http: Shared async HTTP client (timeouts configured by the caller).
            rpc_url: Solana RPC HTTP endpoint.
            max_retries: Attempts per call for transport errors (>= 1).
            min_retry_delay_sec: Initial backoff delay.
            max_retry_delay_sec: Cap for backoff delay.
        """
        if not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._http = http
        self._rpc_url = rpc_url.rstrip("/")
        self._max_retries = max_retries
        self._min_retry_delay = min_retry_delay_sec
        self._max_retry_delay = max_retry_delay_sec
        self._ids = itertools.count(1)

    def _build_body(self, method: str, params: list[Any] | dict[str, Any]) -> dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

    async def call(self, method: str, params: list[Any] | dict[str, Any]) -> Any:
        """Perform one JSON-RPC call with retry; return `result` or raise RpcError."""
        delay = self._min_retry_delay
        for attempt in range(self._max_retries):
            try:
                resp = await self._http.post(self._rpc_url, json=self._build_body(method, params))
                resp.raise_for_status()
                data = resp.json()
                break
            except (httpx.TransportError, httpx.HTTPStatusError, ValueError) as e:
                logger.warning(
                    "rpc_retry",
                    method=method,
                    attempt=attempt + 1,
                    max_retries=self._max_retries,
                    rpc_url=mask_url(self._rpc_url),
                    error=str(e),
                )
                if attempt + 1 >= self._max_retries:
                    raise RpcError(method, str(e)) from e
                await asyncio.sleep(delay)
                delay = min(delay * 2, self._max_retry_delay)

        if not isinstance(data, dict):
            raise RpcError(method, "response is not a JSON object")
        if "error" in data:
            err = data["error"] or {}
            raise RpcError(method, str(err.get("message", err)), err.get("code"))
        return data.get("result")

    async def get_account_info(self, address: str) -> AccountInfo | None:
        """Return the jsonParsed account, or None when it does not exist."""
        result = await self.call("getAccountInfo", [address, {"encoding": "jsonParsed"}])
        value = result.get("value") if isinstance(result, dict) else None
        if value is None:
            logger.info("rpc_account_missing", address=short_address(address))
            return None
        try:
            return AccountInfo.from_rpc_value(address, value)
        except (KeyError, TypeError, ValueError) as e:
            raise RpcError("getAccountInfo", f"malformed account payload: {e}") from e

    async def get_program_data(self, program_data_address: str) -> ProgramDataInfo | None:
        """Fetch and parse an upgradeable program's executable-data account."""
        account = await self.get_account_info(program_data_address)
        if account is None:
            return None
        try:
            return ProgramDataInfo.from_parsed_info(account.parsed_info)
        except (TypeError, ValueError) as e:
            raise RpcError("getAccountInfo", f"malformed program data: {e}") from e

    async def get_token_largest_accounts(self, mint: str) -> list[TokenAccountBalance]:
        result = await self.call("getTokenLargestAccounts", [mint])
        items = result.get("value") if isinstance(result, dict) else None
        if not isinstance(items, list):
            return []
        try:
            return [TokenAccountBalance.from_rpc_item(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            raise RpcError("getTokenLargestAccounts", f"malformed holder item: {e}") from e

    async def get_signatures_for_address(self, address: str, limit: int) -> list[SignatureInfo]:
        if not (1 <= limit <= 1000):
            raise ValueError("limit must be between 1 and 1000")
        result = await self.call("getSignaturesForAddress", [address, {"limit": limit}])
        if not isinstance(result, list):
            return []
        infos: list[SignatureInfo] = []
        for item in result:
            try:
                infos.append(SignatureInfo.from_rpc_item(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.debug("rpc_skip_signature_item", error=str(e))
        return infos
