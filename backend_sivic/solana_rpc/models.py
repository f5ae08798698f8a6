"""
Data models for Solana RPC responses.

Responsibilities:
- Define frozen dataclasses for the jsonParsed payloads the detectors use.
- Validate at the boundary: from_rpc_* constructors raise KeyError, TypeError
  or ValueError on a malformed item, and the client turns that into RpcError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

UPGRADEABLE_LOADER_ID = "BPFLoaderUpgradeab1e11111111111111111111111"


@dataclass(frozen=True)
class AccountInfo:
    """
    Normalized getAccountInfo value (jsonParsed encoding).

    parsed_type is the parser discriminator ("mint", "program", "account", ...)
    or None when the node returned raw bytes.
    """

    address: str
    owner: str
    executable: bool
    lamports: int
    parsed_type: str | None = None
    parsed_info: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_rpc_value(cls, address: str, value: dict[str, Any]) -> "AccountInfo":
        """Build from the `value` object of a getAccountInfo result."""
        data = value.get("data")
        parsed: dict[str, Any] = {}
        if isinstance(data, dict):
            parsed = data.get("parsed") or {}
        info = parsed.get("info") if isinstance(parsed, dict) else None
        return cls(
            address=address,
            owner=str(value["owner"]),
            executable=bool(value.get("executable", False)),
            lamports=int(value.get("lamports") or 0),
            parsed_type=parsed.get("type") if isinstance(parsed, dict) else None,
            parsed_info=dict(info) if isinstance(info, dict) else {},
        )

    @property
    def is_mint(self) -> bool:
        return self.parsed_type == "mint"

    @property
    def program_data_address(self) -> str | None:
        """Address of the executable-data account for upgradeable programs."""
        addr = self.parsed_info.get("programData")
        return str(addr) if addr else None

    def mint_info(self) -> "MintInfo":
        """Mint fields of a parsed mint account; raises ValueError if not a mint."""
        if not self.is_mint:
            raise ValueError(f"account {self.address} is not a mint")
        return MintInfo.from_parsed_info(self.parsed_info)


@dataclass(frozen=True)
class MintInfo:
    """SPL mint state: raw supply in base units plus authorities."""

    decimals: int
    supply: int
    mint_authority: str | None
    freeze_authority: str | None
    is_initialized: bool = True

    @classmethod
    def from_parsed_info(cls, info: dict[str, Any]) -> "MintInfo":
        return cls(
            decimals=int(info["decimals"]),
            supply=int(info["supply"]),
            mint_authority=info.get("mintAuthority") or None,
            freeze_authority=info.get("freezeAuthority") or None,
            is_initialized=bool(info.get("isInitialized", True)),
        )

    @property
    def ui_supply(self) -> float:
        """Supply scaled by 10^decimals."""
        return self.supply / (10 ** self.decimals)


@dataclass(frozen=True)
class ProgramDataInfo:
    """Executable-data account of an upgradeable program."""

    authority: str | None
    slot: int | None = None

    @classmethod
    def from_parsed_info(cls, info: dict[str, Any]) -> "ProgramDataInfo":
        slot = info.get("slot")
        return cls(
            authority=info.get("authority") or None,
            slot=int(slot) if slot is not None else None,
        )


@dataclass(frozen=True)
class TokenAccountBalance:
    """One entry of getTokenLargestAccounts."""

    address: str
    amount: str  # raw base units, as returned by RPC
    decimals: int
    ui_amount: float | None = None

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "TokenAccountBalance":
        ui = item.get("uiAmount")
        return cls(
            address=str(item["address"]),
            amount=str(item["amount"]),
            decimals=int(item.get("decimals") or 0),
            ui_amount=float(ui) if ui is not None else None,
        )


@dataclass(frozen=True)
class SignatureInfo:
    """
    Normalized transaction signature info from getSignaturesForAddress.

    Mirrors Solana RPC response fields; detectors only need `err` to compute
    failure rates but the rest is kept for logging and future checks.
    """

    signature: str
    slot: int
    err: Any  # None if success; dict/object from RPC if failed
    block_time: int | None  # Unix timestamp; None if not available
    memo: str | None
    confirmation_status: str | None  # processed | confirmed | finalized

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "SignatureInfo":
        """Build from a single getSignaturesForAddress result item."""
        return cls(
            signature=item["signature"],
            slot=int(item["slot"]),
            err=item.get("err"),
            block_time=item.get("blockTime"),
            memo=item.get("memo"),
            confirmation_status=item.get("confirmationStatus"),
        )

    @property
    def failed(self) -> bool:
        return self.err is not None
