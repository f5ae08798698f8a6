"""
Value types returned by the data-provider adapters.

Each provider payload is validated into a frozen pydantic model at the
adapter boundary, so a schema change on the provider side surfaces as a
logged schema mismatch (and an absent result) instead of corrupting a
detector step. Fields the provider may omit are Optional; detectors skip
a check when its input is None.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ProviderModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


# -----------------------------------------------------------------------------
# Market data (Birdeye)
# -----------------------------------------------------------------------------


class TokenOverview(ProviderModel):
    """Birdeye /defi/token_overview `data` object."""

    price: float | None = None
    market_cap: float | None = Field(None, alias="mc")
    liquidity: float | None = None
    holder_count: int | None = Field(None, alias="holder")
    price_change_24h: float | None = Field(None, alias="priceChange24hPercent")
    volume_24h: float | None = Field(None, alias="v24hUSD")
    supply: float | None = None


class TokenSecurity(ProviderModel):
    """Birdeye /defi/token_security `data` object."""

    creator_address: str | None = Field(None, alias="creatorAddress")
    creator_percentage: float | None = Field(None, alias="creatorPercentage")
    is_lp_burned: bool | None = Field(None, alias="isLpBurned")
    lp_burned_percent: float | None = Field(None, alias="lpBurnedPercent")
    top10_holder_percent: float | None = Field(None, alias="top10HolderPercent")
    is_mutable: bool | None = Field(None, alias="isMutable")


# -----------------------------------------------------------------------------
# DEX aggregator (DexScreener)
# -----------------------------------------------------------------------------


class PairLiquidity(ProviderModel):
    usd: float | None = None


class PairVolume(ProviderModel):
    h24: float | None = None


class PairPriceChange(ProviderModel):
    h1: float | None = None
    h24: float | None = None


class DexPair(ProviderModel):
    """One entry of DexScreener `pairs`."""

    dex_id: str = Field(..., alias="dexId")
    pair_address: str | None = Field(None, alias="pairAddress")
    price_usd: float | None = Field(None, alias="priceUsd")
    liquidity: PairLiquidity | None = None
    volume: PairVolume | None = None
    price_change: PairPriceChange | None = Field(None, alias="priceChange")
    pair_created_at: int | None = Field(None, alias="pairCreatedAt")

    @property
    def liquidity_usd(self) -> float:
        return (self.liquidity.usd if self.liquidity else None) or 0.0

    @property
    def volume_24h(self) -> float:
        return (self.volume.h24 if self.volume else None) or 0.0

    @property
    def price_change_1h(self) -> float:
        return (self.price_change.h1 if self.price_change else None) or 0.0


class DexPairsResponse(ProviderModel):
    pairs: list[DexPair] | None = None


class DexSummary(ProviderModel):
    """Aggregate over every pair of a token (or program) address."""

    total_pairs: int
    total_liquidity: float
    total_volume_24h: float
    dexes: list[str] = Field(default_factory=list)
    pair_created_at: int | None = None  # epoch ms of the earliest pair
    pairs: list[DexPair] = Field(default_factory=list)

    @property
    def max_abs_price_change_1h(self) -> float:
        return max((abs(p.price_change_1h) for p in self.pairs), default=0.0)


# -----------------------------------------------------------------------------
# Swap simulator (Jupiter)
# -----------------------------------------------------------------------------


class SwapQuote(ProviderModel):
    """Jupiter /swap/v1/quote response (fields used for slippage)."""

    in_amount: str | None = Field(None, alias="inAmount")
    out_amount: str | None = Field(None, alias="outAmount")
    price_impact_pct: float = Field(0.0, alias="priceImpactPct")
    route_plan: list[dict] | None = Field(None, alias="routePlan")


class SlippageReport(ProviderModel):
    buy_slippage_percent: float = 0.0
    sell_slippage_percent: float = 0.0
    is_honeypot: bool = False
    honeypot_reason: str | None = None
    tradeable: bool = True
    tradeable_reason: str | None = None


# -----------------------------------------------------------------------------
# Reputation (RugCheck, SolanaFM)
# -----------------------------------------------------------------------------

SafetyLevel = Literal["safe", "caution", "danger", "unknown"]
ConcentrationRisk = Literal["low", "medium", "high", "critical"]


class RugCheckReport(ProviderModel):
    score: float
    risks: list[dict] | None = None


class SafetyScore(ProviderModel):
    score: float
    risk_level: SafetyLevel
    risk_count: int = 0


class SolanaFMHolder(ProviderModel):
    owner: str | None = None
    amount: str | None = None
    percentage: float = 0.0


class SolanaFMTransfer(ProviderModel):
    signature: str | None = None
    source: str | None = None
    destination: str | None = None
    amount: str | None = None
    success: bool = True


class HolderDistribution(ProviderModel):
    top_holder_percent: float = 0.0
    top5_holders_percent: float = 0.0
    top10_holders_percent: float = 0.0
    holder_count: int = 0
    concentration_risk: ConcentrationRisk = "low"


class TransferAnomalies(ProviderModel):
    recent_transfer_count: int = 0
    unique_senders: int = 0
    unique_receivers: int = 0
    failed_transfers: int = 0
    large_transfers: int = 0
    suspicious_patterns: list[str] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Token metadata (Helius DAS) and AI insight (OpenRouter)
# -----------------------------------------------------------------------------


class TokenMetadata(ProviderModel):
    name: str = "Unknown"
    symbol: str = "UNKNOWN"
    image_url: str | None = None


class AIAnalysis(ProviderModel):
    summary: str
    risk_assessment: str = Field("", alias="riskAssessment")
    key_findings: list[str] = Field(default_factory=list, alias="keyFindings")
    recommendations: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)
