"""
Program (DEX) risk detector.

Six ordered steps evaluate the 19 on-chain and 12 off-chain program
parameters:

    program_info -> tx_volume -> dex_pairs -> mev_analysis
    -> account_activity -> off_chain

MEV, bridge and most off-chain parameters have no evidence source yet;
they are marked checked and reported as placeholders.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from backend_sivic.analysis_engine.indicators import Severity
from backend_sivic.analysis_engine.models import DetectionMode, DexData
from backend_sivic.analysis_engine.params import (
    ProgramOffChainParam as Off,
    ProgramOnChainParam as On,
    program_parameter_sets,
)
from backend_sivic.analytics.detector import Detector, StepSpec, pct
from backend_sivic.analytics.known_programs import program_name
from backend_sivic.providers import Collaborators
from backend_sivic.solana_rpc.models import AccountInfo, ProgramDataInfo

TRANSACTION_SAMPLE = 1000


@dataclass
class ProgramThresholds:
    error_rate_pct: float = 5.0
    volume_to_liquidity_ratio: float = 2.0
    price_pump_pct: float = 50.0


class ProgramDetector(Detector[DexData]):
    mode = DetectionMode.DEX
    steps = (
        StepSpec(
            "program_info",
            "Analyzing Program Info",
            on_chain=(On.PROGRAM_UPGRADE_VULNS, On.UNAUTHORIZED_ADMIN_WITHDRAWALS, On.TICK_ACCOUNT_CREATIONS),
        ),
        StepSpec(
            "tx_volume",
            "Analyzing Transaction Volume",
            on_chain=(
                On.TRANSACTION_VOLUME_SURGES,
                On.FLASH_LOAN_PATTERNS,
                On.ROUNDING_ERRORS,
                On.PROGRAM_UPGRADE_VULNS,
                On.FEE_RECOVERY_FAILURES,
            ),
        ),
        StepSpec(
            "dex_pairs",
            "Analyzing DEX Pairs (DexScreener)",
            on_chain=(
                On.LARGE_VAULT_WITHDRAWALS,
                On.RUG_PULL_SIGNATURES,
                On.PRICE_PUMPS,
                On.ORACLE_FEED_DISCREPANCIES,
            ),
        ),
        StepSpec(
            "mev_analysis",
            "Analyzing MEV Activity (Jito)",
            on_chain=(
                On.SANDWICH_ATTACKS,
                On.MEV_BOT_EXPLOITATION,
                On.HOT_WALLET_DRAINS,
                On.INSIDER_WALLET_CLUSTERS,
                On.MALICIOUS_TX_APPROVALS,
            ),
            off_chain=(Off.BLOCK_ENGINE_LOGS, Off.VALIDATOR_CLIENT_MONITORING),
        ),
        StepSpec(
            "account_activity",
            "Analyzing Account Activity",
            on_chain=(On.BRIDGE_TRANSFER_ANOMALIES, On.WALLET_APPROVAL_SPIKES, On.CROSS_CHAIN_BRIDGE_ANOMALIES),
            off_chain=(Off.RPC_PROVIDER_ANOMALIES,),
        ),
        StepSpec(
            "off_chain",
            "Running Off-Chain Analysis",
            off_chain=(
                Off.SOCIAL_MEDIA_SIGNALS,
                Off.NEWS_RESEARCH_BUZZ,
                Off.AUDIT_SIMULATION_RESULTS,
                Off.FORUM_VALIDATOR_DISCUSSIONS,
                Off.BOT_CONFIG_ALERTS,
                Off.DEPENDENCY_SCANS,
                Off.RESEARCH_REPORTS,
                Off.SIMULATION_TOOLS,
                Off.VALIDATOR_COMMUNICATIONS,
            ),
        ),
    )

    def __init__(
        self,
        address: str,
        account: AccountInfo,
        collaborators: Collaborators,
        program_data: ProgramDataInfo | None = None,
        thresholds: ProgramThresholds | None = None,
    ) -> None:
        on_chain, off_chain = program_parameter_sets()
        facts = DexData(program_id=address, program_name=program_name(address), owner_program=account.owner)
        super().__init__(address, facts, on_chain, off_chain)
        self.account = account
        self.collab = collaborators
        self.program_data = program_data
        self.thresholds = thresholds or ProgramThresholds()

    def _result_payload(self) -> dict[str, Any]:
        return {"dex_data": self.facts}

    async def _step_program_info(self, facts: DexData) -> tuple[DexData, dict[str, Any]]:
        authority = self.program_data.authority if self.program_data else None
        upgradeable = authority is not None
        if upgradeable:
            self.flag(
                On.PROGRAM_UPGRADE_VULNS,
                authority,
                indicator_id="upgradeable_program",
                category="program",
                name="Upgradeable Program",
                severity=Severity.HIGH,
                description="Program can be modified by upgrade authority",
            )
        facts = facts.update(is_upgradeable=upgradeable, upgrade_authority=authority)
        return facts, {"isUpgradeable": upgradeable, "upgradeAuthority": authority or "Immutable"}

    async def _step_tx_volume(self, facts: DexData) -> tuple[DexData, dict[str, Any]]:
        signatures = await self.collab.rpc.get_signatures_for_address(self.address, TRANSACTION_SAMPLE)
        failed = sum(1 for s in signatures if s.failed)
        rate = failed / len(signatures) * 100 if signatures else 0.0
        limit = self.thresholds.error_rate_pct
        if rate > limit:
            self.flag(
                On.PROGRAM_UPGRADE_VULNS,
                f"{rate:.1f}% errors",
                indicator_id="high_error_rate",
                category="program",
                name="High Program Error Rate",
                severity=Severity.HIGH,
                value=pct(rate),
                description=f"More than {limit:g}% of transactions failing",
            )
        facts = facts.update(transaction_count=len(signatures), recent_error_rate=rate)
        return facts, {"transactions": len(signatures), "errorRate": pct(rate)}

    async def _step_dex_pairs(self, facts: DexData) -> tuple[DexData, dict[str, Any]]:
        t = self.thresholds
        summary = await self.collab.dex.pairs(self.address)
        if summary is None or not summary.pairs:
            return facts, {"pairs": 0, "tvl": facts.tvl, "volume24h": facts.volume_24h}

        liquidity = summary.total_liquidity
        volume = summary.total_volume_24h
        if liquidity > 0 and volume > liquidity * t.volume_to_liquidity_ratio:
            self.flag(
                On.LARGE_VAULT_WITHDRAWALS,
                f"Vol: ${volume / 1000:.0f}k / Liq: ${liquidity / 1000:.0f}k",
                indicator_id="high_volume_to_liquidity",
                category="holder",
                name="Unusual Volume to Liquidity Ratio",
                severity=Severity.MEDIUM,
                value=f"{volume / liquidity * 100:.0f}%",
                description="Trading volume significantly exceeds liquidity",
            )

        max_change = summary.max_abs_price_change_1h
        if max_change > t.price_pump_pct:
            self.flag(
                On.PRICE_PUMPS,
                pct(max_change),
                indicator_id="price_pump",
                category="activity",
                name="Significant Price Movement",
                severity=Severity.HIGH,
                value=f"{max_change:.1f}% in 1h",
                description="Price moved significantly in short time",
            )

        facts = facts.update(
            tvl=liquidity,
            volume_24h=volume,
            pair_count=summary.total_pairs,
            max_price_change_1h=max_change,
        )
        return facts, {"pairs": summary.total_pairs, "tvl": liquidity, "volume24h": volume}

    async def _step_mev_analysis(self, facts: DexData) -> tuple[DexData, dict[str, Any]]:
        # Sandwich detection needs bundle-level data; nothing to count yet.
        return facts, {"sandwichesDetected": 0}

    async def _step_account_activity(self, facts: DexData) -> tuple[DexData, dict[str, Any]]:
        return facts, {"analysisComplete": True}

    async def _step_off_chain(self, facts: DexData) -> tuple[DexData, dict[str, Any]]:
        if not facts.program_name:
            self.flag(
                Off.AUDIT_SIMULATION_RESULTS,
                "Unknown program",
                indicator_id="unknown_program",
                category="program",
                name="Unidentified Program",
                severity=Severity.MEDIUM,
                value="Unknown",
                description="Program is not recognized as a known DEX",
            )
        return facts, {"offChainChecks": len(Off)}
