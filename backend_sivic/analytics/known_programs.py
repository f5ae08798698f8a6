"""
Registry of well-known Solana DEX / AMM program IDs (mainnet).

The program detector uses it to name a program and to flag programs that
are not recognized.
"""

from __future__ import annotations

RAYDIUM_PROGRAMS = {
    "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8": "Raydium AMM",
    "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK": "Raydium CLMM",
    "CPMMoo8L3F4NbTegBCKVNunggL7H1ZpdTHKxQB5qKP1C": "Raydium CPMM",
}
ORCA_PROGRAMS = {
    "9W959DqEETiGZocYWCQPaJ6sBmUzgfxXfqGeTEdp3aQP": "Orca V1",
    "whirLbMiicVdio4qvUfM5KQ6ebyKoEK6KqnioypnfdR": "Orca Whirlpool",
}
JUPITER_PROGRAMS = {
    "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4": "Jupiter Aggregator v6",
    "JUP5cHjnnCx2DppVsufsLrXs8EBZeEZz2JGWFAyJGbE": "Jupiter Aggregator v5",
}
OTHER_PROGRAMS = {
    "LBUZKhRxPF3XUpBCjp4YzTKgLccjZhTSDM9YuVaPwxo": "Meteora DLMM",
    "PhoeNiXZ8ByJGLkxNfZRnkUfjvmuYqLR89jjFHGqdXY": "Phoenix",
    "srmqPvymJeFKQ4zGQed1GFppgkRHL9kaELCbyksJtPX": "OpenBook",
    "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P": "Pump.fun",
}

KNOWN_PROGRAMS: dict[str, str] = {
    **RAYDIUM_PROGRAMS,
    **ORCA_PROGRAMS,
    **JUPITER_PROGRAMS,
    **OTHER_PROGRAMS,
}


def program_name(program_id: str) -> str | None:
    """Display name for a known program; None when unrecognized."""
    return KNOWN_PROGRAMS.get((program_id or "").strip())