"""
Off-chain reputation provider: safety score, holder distribution, transfer
anomalies and the known-drainer blacklist behind one object.

The blacklist is a JSON array of addresses loaded from KNOWN_DRAINERS_PATH
(default: backend_sivic/data/known_drainers.json). Missing or unreadable
files yield an empty set.
"""

from __future__ import annotations

import json
from pathlib import Path

from backend_sivic.providers.models import HolderDistribution, SafetyScore, TransferAnomalies
from backend_sivic.providers.rugcheck import RugCheckClient
from backend_sivic.providers.solanafm import SolanaFMClient
from backend_sivic.sivic_logging import get_logger

logger = get_logger(__name__)

DEFAULT_DRAINERS_PATH = Path(__file__).resolve().parent.parent / "data" / "known_drainers.json"


def load_known_drainers(path: Path | None = None) -> frozenset[str]:
    """Load drainer addresses from JSON. Returns empty set on failure."""
    path = path or DEFAULT_DRAINERS_PATH
    if not path.is_file():
        logger.debug("known_drainers_missing", path=str(path))
        return frozenset()
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("known_drainers_load_failed", path=str(path), error=str(e))
        return frozenset()
    if not isinstance(data, list):
        return frozenset()
    return frozenset(str(a).strip() for a in data if a)


class ReputationProvider:
    def __init__(
        self,
        rugcheck: RugCheckClient,
        solanafm: SolanaFMClient,
        known_drainers: frozenset[str] = frozenset(),
    ) -> None:
        self._rugcheck = rugcheck
        self._solanafm = solanafm
        self._known_drainers = known_drainers

    async def safety_score(self, mint: str) -> SafetyScore | None:
        return await self._rugcheck.safety_score(mint)

    async def holder_distribution(self, mint: str) -> HolderDistribution | None:
        return await self._solanafm.holder_distribution(mint)

    async def transfer_anomalies(self, mint: str) -> TransferAnomalies | None:
        return await self._solanafm.transfer_anomalies(mint)

    def is_known_drainer(self, address: str) -> bool:
        return address in self._known_drainers
