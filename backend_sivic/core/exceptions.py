"""
Application-level exceptions.

Responsibilities:
- Define domain exceptions (InvalidAddressError, AccountNotFoundError, RpcError).
- Provide consistent error codes and messages for API and stream error handling.

Fatal errors (invalid address, missing account) stop an analysis before any
detector runs. RpcError is step-local: detectors catch it and emit step_error.
"""

from __future__ import annotations


class SivicError(Exception):
    """Base class for all Sivic errors."""

    code = "sivic_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class InvalidAddressError(SivicError):
    """Address is missing or not a base58 Solana public key."""

    code = "invalid_address"

    def __init__(self, address: str | None, message: str = "Invalid Solana address") -> None:
        super().__init__(message)
        self.address = address


class AccountNotFoundError(SivicError):
    """getAccountInfo returned no account for a well-formed address."""

    code = "account_not_found"

    def __init__(self, address: str) -> None:
        super().__init__("Account not found")
        self.address = address


class RpcError(SivicError):
    """Transport failure or JSON-RPC error object from the Solana RPC node."""

    code = "rpc_error"

    def __init__(self, method: str, message: str, rpc_code: int | None = None) -> None:
        super().__init__(f"Solana RPC error: {message} (method={method}, code={rpc_code})")
        self.method = method
        self.rpc_code = rpc_code


class ProviderError(SivicError):
    """Non-fatal data-provider failure; adapters convert it to an absent result."""

    code = "provider_error"

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code
