"""
Solana chain RPC package.

Async JSON-RPC client over httpx plus normalized frozen models for the
account, mint, program-data, largest-holder and signature payloads the
detectors consume.
"""

from backend_sivic.solana_rpc.client import SolanaRpcClient
from backend_sivic.solana_rpc.models import (
    AccountInfo,
    MintInfo,
    ProgramDataInfo,
    SignatureInfo,
    TokenAccountBalance,
)

__all__ = [
    "AccountInfo",
    "MintInfo",
    "ProgramDataInfo",
    "SignatureInfo",
    "SolanaRpcClient",
    "TokenAccountBalance",
]
