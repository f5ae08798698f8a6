"""
Account classification and address validation.

Decides once per request which detector runs for an address:
- "token" when the account is a parsed SPL mint
- "dex" (program) for anything else, executable or not

Address validation happens before any network call: base58 alphabet,
32-44 characters, and decodable as a 32-byte public key.
"""

from __future__ import annotations

import re

from solders.pubkey import Pubkey

from backend_sivic.analysis_engine.models import DetectionMode
from backend_sivic.core.exceptions import InvalidAddressError
from backend_sivic.solana_rpc.models import AccountInfo

BASE58_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def validate_address(address: str | None) -> str:
    """Return the stripped address or raise InvalidAddressError."""
    addr = (address or "").strip()
    if not addr:
        raise InvalidAddressError(address, "Address is required")
    if not BASE58_ADDRESS_RE.match(addr):
        raise InvalidAddressError(address)
    try:
        Pubkey.from_string(addr)
    except ValueError as e:
        raise InvalidAddressError(address) from e
    return addr


def classify(account: AccountInfo) -> DetectionMode:
    if account.is_mint:
        return DetectionMode.TOKEN
    return DetectionMode.DEX


def account_type_label(account: AccountInfo) -> str:
    """Parser discriminator shown to the caller; "program" when absent."""
    return account.parsed_type or "program"
