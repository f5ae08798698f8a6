"""
Token (SPL mint) risk detector.

Eight ordered steps evaluate the 18 on-chain and 13 off-chain token
parameters:

    basic_info -> market_data -> security_info -> dex_pairs -> slippage
    -> holders -> transactions -> off_chain

Each step reads the facts produced so far (decimals, supply, mint
authority, ...) and returns updated facts plus a small summary for its
step_complete event. A provider returning None leaves the related checks
untriggered; None is "unknown", never "safe".
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from backend_sivic.analysis_engine.indicators import Severity
from backend_sivic.analysis_engine.models import DetectionMode, TokenData, TopHolder
from backend_sivic.analysis_engine.params import (
    TokenOffChainParam as Off,
    TokenOnChainParam as On,
    token_parameter_sets,
)
from backend_sivic.analytics.detector import Detector, StepSpec, pct, usd
from backend_sivic.providers import Collaborators
from backend_sivic.solana_rpc.models import AccountInfo

TRANSACTION_SAMPLE = 100
TOP_HOLDERS_KEPT = 20


@dataclass
class TokenThresholds:
    """
    Thresholds for token rules. Percentages are 0-100; dollar amounts USD.
    """

    failed_project_drop_pct: float = 95.0
    low_volume_usd: float = 100.0
    creator_high_pct: float = 10.0
    creator_critical_pct: float = 30.0
    top10_concentration_pct: float = 80.0
    low_liquidity_usd: float = 10_000.0
    critical_liquidity_usd: float = 1_000.0
    new_token_hours: float = 24.0
    sell_slippage_moderate_pct: float = 5.0
    sell_slippage_high_pct: float = 10.0
    sell_slippage_critical_pct: float = 30.0
    holder_high_pct: float = 25.0
    holder_critical_pct: float = 50.0
    failure_rate_pct: float = 30.0


class TokenDetector(Detector[TokenData]):
    mode = DetectionMode.TOKEN
    steps = (
        StepSpec(
            "basic_info",
            "Analyzing Token Basic Info",
            on_chain=(On.MASSIVE_MINTS, On.ASSET_FREEZES),
        ),
        StepSpec(
            "market_data",
            "Fetching Market Data (Birdeye)",
            on_chain=(On.FAILED_PROJECT_SIGNATURES, On.TOKEN_SUPPLY_INFLATION),
            off_chain=(Off.RUG_PULL_METRICS,),
        ),
        StepSpec(
            "security_info",
            "Fetching Security Info (Birdeye)",
            on_chain=(On.TREASURY_DRAINS, On.UNAUTHORIZED_WITHDRAWALS, On.APPROVAL_HIJACKING),
            off_chain=(Off.RUG_PULL_METRICS, Off.CENTRALIZATION_WARNINGS),
        ),
        StepSpec(
            "dex_pairs",
            "Fetching DEX Pairs (DexScreener)",
            on_chain=(On.BONDING_CURVE_DISTORTIONS, On.SLOW_DRAIN_PATTERNS),
            off_chain=(Off.SOCIAL_MEDIA_SIGNALS,),
        ),
        StepSpec(
            "slippage",
            "Analyzing Slippage (Jupiter)",
            on_chain=(On.WALLET_DRAINS,),
            off_chain=(Off.ECONOMIC_MODEL_STRESS,),
        ),
        StepSpec(
            "holders",
            "Analyzing Token Holders",
            on_chain=(On.VICTIM_WALLET_SPIKES, On.ACCOUNT_IMPERSONATION),
        ),
        StepSpec(
            "transactions",
            "Analyzing Recent Transactions",
            on_chain=(
                On.RACE_CONDITIONS,
                On.GOVERNANCE_EXPLOITS,
                On.OVER_BORROWING,
                On.ZK_PROOF_ANOMALIES,
                On.SIGNER_CHECK_FAILURES,
                On.HARDWARE_WALLET_BREACHES,
            ),
        ),
        StepSpec("off_chain", "Running Off-Chain Analysis", off_chain=tuple(Off)),
    )

    def __init__(
        self,
        address: str,
        account: AccountInfo,
        collaborators: Collaborators,
        thresholds: TokenThresholds | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        on_chain, off_chain = token_parameter_sets()
        super().__init__(address, TokenData(), on_chain, off_chain)
        self.account = account
        self.collab = collaborators
        self.thresholds = thresholds or TokenThresholds()
        self._clock = clock

    def _result_payload(self) -> dict[str, Any]:
        return {"token_data": self.facts}

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    async def _step_basic_info(self, facts: TokenData) -> tuple[TokenData, dict[str, Any]]:
        mint = self.account.mint_info()
        if mint.mint_authority:
            self.flag(
                On.MASSIVE_MINTS,
                mint.mint_authority,
                indicator_id="mint_authority_active",
                category="authority",
                name="Active Mint Authority",
                severity=Severity.CRITICAL,
                description="Token has active mint authority - unlimited supply possible",
            )
        if mint.freeze_authority:
            self.flag(
                On.ASSET_FREEZES,
                mint.freeze_authority,
                indicator_id="freeze_authority_active",
                category="authority",
                name="Active Freeze Authority",
                severity=Severity.HIGH,
                description="Token accounts can be frozen by authority",
            )
        facts = facts.update(
            decimals=mint.decimals,
            supply=mint.ui_supply,
            mint_authority=mint.mint_authority,
            freeze_authority=mint.freeze_authority,
        )
        return facts, {
            "supply": facts.supply,
            "mintAuthority": "Active" if mint.mint_authority else "Revoked",
            "freezeAuthority": "Active" if mint.freeze_authority else "Revoked",
        }

    async def _step_market_data(self, facts: TokenData) -> tuple[TokenData, dict[str, Any]]:
        t = self.thresholds
        overview = await self.collab.market.overview(self.address)
        if overview is not None:
            facts = facts.update(
                price=overview.price,
                market_cap=overview.market_cap,
                liquidity=overview.liquidity,
                holders=overview.holder_count,
                price_change_24h=overview.price_change_24h,
                volume_24h=overview.volume_24h,
            )
            change = overview.price_change_24h
            if change is not None and change < -t.failed_project_drop_pct:
                self.flag(
                    On.FAILED_PROJECT_SIGNATURES,
                    pct(change),
                    indicator_id="failed_project",
                    category="activity",
                    name="Failed Project Signature",
                    severity=Severity.CRITICAL,
                    description="Price dropped >95% - potential rug or failed project",
                )
            volume = overview.volume_24h
            if volume is not None and volume < t.low_volume_usd:
                self.flag(
                    Off.RUG_PULL_METRICS,
                    usd(volume),
                    indicator_id="no_volume",
                    category="activity",
                    name="No Trading Volume",
                    severity=Severity.HIGH,
                    description="24h trading volume is extremely low",
                )
        return facts, {"price": facts.price, "marketCap": facts.market_cap, "liquidity": facts.liquidity}

    async def _step_security_info(self, facts: TokenData) -> tuple[TokenData, dict[str, Any]]:
        t = self.thresholds
        security = await self.collab.market.security(self.address)
        if security is not None:
            facts = facts.update(
                creator_address=security.creator_address,
                creator_percentage=security.creator_percentage,
                lp_burned=security.is_lp_burned,
                lp_burned_percent=security.lp_burned_percent,
                top10_holder_percent=security.top10_holder_percent,
            )
            creator = security.creator_percentage
            if creator is not None and creator > t.creator_high_pct:
                critical = creator > t.creator_critical_pct
                self.flag(
                    On.APPROVAL_HIJACKING,
                    pct(creator),
                    indicator_id="high_creator_holdings",
                    category="holder",
                    name="Critical Creator Holdings" if critical else "High Creator Holdings",
                    severity=Severity.CRITICAL if critical else Severity.HIGH,
                    description=f"Creator holds {creator:.1f}% of supply",
                )
            if security.is_lp_burned is False:
                self.flag(
                    Off.RUG_PULL_METRICS,
                    "LP Not Burned",
                    indicator_id="lp_not_burned",
                    category="holder",
                    name="Unlocked LP Tokens",
                    severity=Severity.HIGH,
                    value="Not Burned",
                    description="Liquidity pool tokens are not burned - rug pull risk",
                )
            top10 = security.top10_holder_percent
            if top10 is not None and top10 > t.top10_concentration_pct:
                self.flag(
                    Off.CENTRALIZATION_WARNINGS,
                    pct(top10),
                    indicator_id="top10_concentration",
                    category="holder",
                    name="High Top 10 Concentration",
                    severity=Severity.HIGH,
                    description="Top 10 holders control majority of supply",
                )
        return facts, {"creatorPercent": facts.creator_percentage, "lpBurned": facts.lp_burned}

    async def _step_dex_pairs(self, facts: TokenData) -> tuple[TokenData, dict[str, Any]]:
        t = self.thresholds
        summary = await self.collab.dex.pairs(self.address)
        if summary is None:
            return facts, {"pairs": 0, "liquidity": 0, "dexes": "N/A"}

        liquidity = summary.total_liquidity
        if liquidity < t.critical_liquidity_usd:
            self.flag(
                On.SLOW_DRAIN_PATTERNS,
                usd(liquidity),
                indicator_id="critical_low_liquidity",
                category="holder",
                name="Critically Low Liquidity",
                severity=Severity.CRITICAL,
                description="Total liquidity is below $1,000",
            )
        elif liquidity < t.low_liquidity_usd:
            self.flag(
                On.SLOW_DRAIN_PATTERNS,
                usd(liquidity),
                indicator_id="low_liquidity",
                category="holder",
                name="Low Liquidity",
                severity=Severity.HIGH,
                description="Total liquidity is below $10,000",
            )

        facts = facts.update(
            dex_pairs=summary.total_pairs,
            dex_names=tuple(summary.dexes),
            dex_liquidity=liquidity,
            dex_volume_24h=summary.total_volume_24h,
        )
        if summary.pair_created_at:
            age_hours = (self._clock() * 1000 - summary.pair_created_at) / 3_600_000
            facts = facts.update(created_at=summary.pair_created_at, age_in_days=age_hours / 24)
            if age_hours < t.new_token_hours:
                self.flag(
                    Off.SOCIAL_MEDIA_SIGNALS,
                    f"{age_hours:.1f} hours",
                    indicator_id="very_new_token",
                    category="activity",
                    name="Very New Token",
                    severity=Severity.HIGH,
                    description="Token was created less than 24 hours ago",
                )
        return facts, {
            "pairs": summary.total_pairs,
            "liquidity": liquidity,
            "dexes": ", ".join(summary.dexes) or "N/A",
        }

    async def _step_slippage(self, facts: TokenData) -> tuple[TokenData, dict[str, Any]]:
        t = self.thresholds
        report = await self.collab.swap.slippage(self.address)
        if report is None:
            return facts, {"buySlippage": "N/A", "sellSlippage": "N/A", "honeypot": None}
        if not report.tradeable and not report.is_honeypot:
            return facts, {
                "buySlippage": "N/A",
                "sellSlippage": "N/A",
                "honeypot": False,
                "tradeable": False,
                "reason": report.tradeable_reason,
            }

        if report.is_honeypot:
            self.flag(
                On.WALLET_DRAINS,
                report.honeypot_reason or "Detected",
                indicator_id="honeypot",
                category="activity",
                name="Potential Honeypot",
                severity=Severity.CRITICAL,
                description="Token shows honeypot characteristics - may not be sellable",
            )

        sell = report.sell_slippage_percent
        tier = None
        if sell > t.sell_slippage_critical_pct:
            tier = ("critical_sell_slippage", "Critical Sell Slippage", Severity.CRITICAL,
                    "Selling has extreme price impact")
        elif sell > t.sell_slippage_high_pct:
            tier = ("high_sell_slippage", "High Sell Slippage", Severity.HIGH,
                    "Selling has high price impact")
        elif sell > t.sell_slippage_moderate_pct:
            tier = ("moderate_sell_slippage", "Moderate Sell Slippage", Severity.MEDIUM,
                    "Selling has moderate price impact")
        if tier is not None:
            indicator_id, name, severity, description = tier
            self.flag(
                Off.ECONOMIC_MODEL_STRESS,
                pct(sell),
                indicator_id=indicator_id,
                category="activity",
                name=name,
                severity=severity,
                description=description,
            )

        facts = facts.update(
            buy_slippage=report.buy_slippage_percent,
            sell_slippage=sell,
            is_honeypot=report.is_honeypot,
            honeypot_reason=report.honeypot_reason,
        )
        return facts, {
            "buySlippage": f"{report.buy_slippage_percent:.2f}%",
            "sellSlippage": f"{sell:.2f}%",
            "honeypot": report.is_honeypot,
        }

    async def _step_holders(self, facts: TokenData) -> tuple[TokenData, dict[str, Any]]:
        t = self.thresholds
        accounts = await self.collab.rpc.get_token_largest_accounts(self.address)
        if not accounts:
            return facts, {"topHolders": 0}
        if facts.decimals is None or not facts.supply:
            self.log.info("token_holders_supply_unknown", holders=len(accounts))
            return facts, {"topHolders": len(accounts), "concentration": "N/A"}

        scale = 10 ** facts.decimals
        supply = facts.supply
        holders: list[TopHolder] = []
        for rank, acct in enumerate(accounts[:TOP_HOLDERS_KEPT], start=1):
            formatted = float(acct.amount) / scale
            holders.append(
                TopHolder(
                    rank=rank,
                    address=acct.address,
                    amount=acct.amount,
                    amount_formatted=formatted,
                    percentage=formatted / supply * 100,
                )
            )
        top = holders[0].percentage
        self.log.debug("token_top_holder", percent=round(top, 2))

        if top > t.holder_high_pct:
            critical = top > t.holder_critical_pct
            self.flag(
                On.VICTIM_WALLET_SPIKES,
                pct(top),
                indicator_id="extreme_concentration" if critical else "high_concentration",
                category="holder",
                name="Extreme Holder Concentration" if critical else "High Holder Concentration",
                severity=Severity.CRITICAL if critical else Severity.HIGH,
                description=f"Top holder has {top:.1f}% of supply",
            )
        facts = facts.update(top_holders=tuple(holders), top_holder_percent=top)
        return facts, {"topHolders": len(accounts)}

    async def _step_transactions(self, facts: TokenData) -> tuple[TokenData, dict[str, Any]]:
        signatures = await self.collab.rpc.get_signatures_for_address(self.address, TRANSACTION_SAMPLE)
        failed = sum(1 for s in signatures if s.failed)
        rate = failed / len(signatures) * 100 if signatures else 0.0
        if rate > self.thresholds.failure_rate_pct:
            self.flag(
                On.RACE_CONDITIONS,
                pct(rate),
                indicator_id="high_failure_rate",
                category="activity",
                name="High Transaction Failure Rate",
                severity=Severity.MEDIUM,
                description="Many transactions are failing",
            )
        facts = facts.update(
            transaction_count=len(signatures),
            failed_transactions=failed,
            failure_rate=rate,
        )
        return facts, {"total": len(signatures), "failed": failed, "failureRate": pct(rate)}

    async def _step_off_chain(self, facts: TokenData) -> tuple[TokenData, dict[str, Any]]:
        reputation = self.collab.reputation

        safety = await reputation.safety_score(self.address)
        if safety is not None:
            facts = facts.update(rug_check_score=safety.score, rug_check_risk_level=safety.risk_level)
            score_label = f"Score: {safety.score:.0f}/100"
            if safety.risk_level == "danger":
                self.flag(
                    Off.RUG_PULL_METRICS,
                    score_label,
                    indicator_id="rugcheck_danger",
                    category="security",
                    name="RugCheck Danger Rating",
                    severity=Severity.CRITICAL,
                    description="Token flagged as dangerous by RugCheck safety analysis",
                )
            elif safety.risk_level == "caution":
                self.flag(
                    Off.RUG_PULL_METRICS,
                    score_label,
                    indicator_id="rugcheck_caution",
                    category="security",
                    name="RugCheck Caution Rating",
                    severity=Severity.MEDIUM,
                    description="Token requires caution according to RugCheck",
                )

        distribution = await reputation.holder_distribution(self.address)
        if distribution is not None and distribution.holder_count > 0:
            facts = facts.update(concentration_risk=distribution.concentration_risk)
            if distribution.concentration_risk == "critical":
                self.flag(
                    Off.CENTRALIZATION_WARNINGS,
                    f"Top 10 hold {distribution.top10_holders_percent:.1f}%",
                    indicator_id="solanafm_concentration",
                    category="holder",
                    name="Critical Centralization",
                    severity=Severity.CRITICAL,
                    description="Extreme token concentration detected via SolanaFM",
                )

        creator = facts.mint_authority
        if creator and reputation.is_known_drainer(creator):
            self.flag(
                Off.PHISHING_TX_CLUSTERS,
                creator,
                indicator_id="known_drainer",
                category="security",
                name="Known Drainer Creator",
                severity=Severity.CRITICAL,
                description="Token creator is associated with known drainer addresses",
            )

        anomalies = await reputation.transfer_anomalies(self.address)
        if anomalies is not None and anomalies.suspicious_patterns:
            patterns = anomalies.suspicious_patterns
            facts = facts.update(transfer_anomalies=tuple(patterns))
            self.flag(
                Off.ECONOMIC_MODEL_STRESS,
                f"{len(patterns)} issues",
                indicator_id="transfer_anomalies",
                category="activity",
                name="Transfer Anomalies Detected",
                severity=Severity.HIGH if len(patterns) >= 2 else Severity.MEDIUM,
                description="; ".join(patterns),
            )

        return facts, {
            "offChainChecks": len(Off),
            "rugCheckScore": safety.score if safety else None,
            "concentrationRisk": distribution.concentration_risk if distribution else None,
        }
