"""
Shared HTTP plumbing for third-party data providers.

Every provider adapter returns an absent result (None or empty) rather than
raising on a non-fatal failure: transport errors, timeouts, non-2xx status,
non-JSON bodies and payloads that fail model validation are all logged and
converted. Detectors treat absence as "unknown", never as "safe".
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from backend_sivic.core.exceptions import ProviderError
from backend_sivic.sivic_logging import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class ProviderClient:
    """Base class: GET/POST JSON with a per-provider timeout and headers."""

    name = "provider"

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout_sec: float = 10.0,
    ) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._headers = {"Accept": "application/json", **(headers or {})}
        self._timeout = httpx.Timeout(timeout_sec)

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def _fetch(self, method: str, path: str, **kwargs: Any) -> Any:
        """Issue a request and decode JSON; raise ProviderError on any failure."""
        try:
            resp = await self._http.request(
                method,
                self._url(path),
                headers={**self._headers, **kwargs.pop("headers", {})},
                timeout=self._timeout,
                **kwargs,
            )
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"request failed: {e!r}") from e
        if resp.status_code >= 400:
            raise ProviderError(
                self.name, f"HTTP {resp.status_code} for {path}", status_code=resp.status_code
            )
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(self.name, "response is not JSON") from e

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any | None:
        try:
            return await self._fetch("GET", path, params=params)
        except ProviderError as e:
            logger.warning("provider_request_failed", provider=self.name, path=path, error=e.message)
            return None

    def _validate(self, model: type[ModelT], payload: Any) -> ModelT | None:
        """Validate a payload against a provider model; None on schema mismatch."""
        if payload is None:
            return None
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.warning(
                "provider_schema_mismatch",
                provider=self.name,
                model=model.__name__,
                errors=e.error_count(),
            )
            return None
