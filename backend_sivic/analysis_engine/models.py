"""
Result and event models for one detection run.

- TokenData / DexData: facts collected along the way. Frozen; each detector
  step receives the current facts and returns an updated copy.
- DetectionResult: terminal artifact of a run, built once and never mutated.
- StepEvent: transient wire message relayed to the caller.

Wire format is camelCase JSON; Python attributes are snake_case.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any

from backend_sivic.analysis_engine.indicators import RiskIndicator
from backend_sivic.analysis_engine.params import (
    PARAMS_VERSION,
    ParamCounts,
    ParameterSet,
    ProgramOffChainParam,
    ProgramOnChainParam,
    TokenOffChainParam,
    TokenOnChainParam,
)
from backend_sivic.analysis_engine.scorer import RiskLevel


class DetectionMode(str, Enum):
    TOKEN = "token"
    DEX = "dex"


class StepType(str, Enum):
    STEP_START = "step_start"
    STEP_COMPLETE = "step_complete"
    STEP_ERROR = "step_error"
    DATA_UPDATE = "data_update"
    COMPLETE = "complete"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _facts_to_dict(obj: Any) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if isinstance(value, tuple):
            value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
        out[_camel(f.name)] = value
    return out


@dataclass(frozen=True)
class TopHolder:
    rank: int
    address: str
    amount: str
    amount_formatted: float
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "address": self.address,
            "amount": self.amount,
            "amountFormatted": self.amount_formatted,
            "percentage": self.percentage,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TopHolder":
        return cls(
            rank=int(data["rank"]),
            address=data["address"],
            amount=str(data["amount"]),
            amount_formatted=float(data["amountFormatted"]),
            percentage=float(data["percentage"]),
        )


@dataclass(frozen=True)
class TokenData:
    """Facts gathered by the token detector. None means unknown."""

    decimals: int | None = None
    supply: float | None = None
    mint_authority: str | None = None
    freeze_authority: str | None = None
    price: float | None = None
    market_cap: float | None = None
    liquidity: float | None = None
    holders: int | None = None
    price_change_24h: float | None = None
    volume_24h: float | None = None
    creator_address: str | None = None
    creator_percentage: float | None = None
    lp_burned: bool | None = None
    lp_burned_percent: float | None = None
    top10_holder_percent: float | None = None
    dex_pairs: int | None = None
    dex_names: tuple[str, ...] = ()
    dex_liquidity: float | None = None
    dex_volume_24h: float | None = None
    created_at: int | None = None
    age_in_days: float | None = None
    buy_slippage: float | None = None
    sell_slippage: float | None = None
    is_honeypot: bool | None = None
    honeypot_reason: str | None = None
    top_holders: tuple[TopHolder, ...] = ()
    top_holder_percent: float | None = None
    transaction_count: int | None = None
    failed_transactions: int | None = None
    failure_rate: float | None = None
    rug_check_score: float | None = None
    rug_check_risk_level: str | None = None
    concentration_risk: str | None = None
    transfer_anomalies: tuple[str, ...] = ()

    def update(self, **changes: Any) -> "TokenData":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return _facts_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TokenData":
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            key = _camel(f.name)
            if key not in data:
                continue
            value = data[key]
            if f.name == "top_holders":
                value = tuple(TopHolder.from_dict(h) for h in value or [])
            elif f.name in ("dex_names", "transfer_anomalies"):
                value = tuple(value or [])
            kwargs[f.name] = value
        return cls(**kwargs)


@dataclass(frozen=True)
class DexData:
    """Facts gathered by the program detector."""

    program_id: str
    program_name: str | None = None
    owner_program: str | None = None
    is_upgradeable: bool | None = None
    upgrade_authority: str | None = None
    transaction_count: int | None = None
    recent_error_rate: float | None = None
    tvl: float | None = None
    volume_24h: float | None = None
    pair_count: int | None = None
    max_price_change_1h: float | None = None

    def update(self, **changes: Any) -> "DexData":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return _facts_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DexData":
        return cls(**{f.name: data[_camel(f.name)] for f in fields(cls) if _camel(f.name) in data})


_PARAM_ENUMS = {
    DetectionMode.TOKEN: (TokenOnChainParam, TokenOffChainParam),
    DetectionMode.DEX: (ProgramOnChainParam, ProgramOffChainParam),
}


@dataclass(frozen=True)
class DetectionResult:
    """
    Terminal artifact of one detector run.

    The parameter sets are detached copies; mutating the detector afterwards
    does not change a built result.
    """

    address: str
    detection_mode: DetectionMode
    on_chain_params: ParameterSet
    off_chain_params: ParameterSet
    risk_indicators: tuple[RiskIndicator, ...]
    risk_score: int
    risk_grade: str
    overall_risk: RiskLevel
    token_data: TokenData | None = None
    dex_data: DexData | None = None
    params_version: str = field(default=PARAMS_VERSION)

    @property
    def on_chain_counts(self) -> ParamCounts:
        return self.on_chain_params.counts()

    @property
    def off_chain_counts(self) -> ParamCounts:
        return self.off_chain_params.counts()

    @property
    def total_counts(self) -> ParamCounts:
        return self.on_chain_counts + self.off_chain_counts

    def to_dict(self) -> dict[str, Any]:
        on, off = self.on_chain_counts, self.off_chain_counts
        out: dict[str, Any] = {
            "address": self.address,
            "detectionMode": self.detection_mode.value,
            "paramsVersion": self.params_version,
            "totalParamsChecked": on.checked + off.checked,
            "totalParamsTriggered": on.triggered + off.triggered,
            "onChainParamsChecked": on.checked,
            "offChainParamsChecked": off.checked,
            "onChainParamsTriggered": on.triggered,
            "offChainParamsTriggered": off.triggered,
            "evaluatedParams": on.evaluated + off.evaluated,
            "onChainParams": self.on_chain_params.to_dict(),
            "offChainParams": self.off_chain_params.to_dict(),
            "riskIndicators": [i.to_dict() for i in self.risk_indicators],
            "riskScore": {"score": self.risk_score, "grade": self.risk_grade},
            "overallRisk": self.overall_risk.value,
        }
        if self.token_data is not None:
            out["tokenData"] = self.token_data.to_dict()
        if self.dex_data is not None:
            out["dexData"] = self.dex_data.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DetectionResult":
        mode = DetectionMode(data["detectionMode"])
        on_enum, off_enum = _PARAM_ENUMS[mode]
        score = data["riskScore"]
        token = data.get("tokenData")
        dex = data.get("dexData")
        return cls(
            address=data["address"],
            detection_mode=mode,
            on_chain_params=ParameterSet.from_dict(on_enum, data["onChainParams"]),
            off_chain_params=ParameterSet.from_dict(off_enum, data["offChainParams"]),
            risk_indicators=tuple(RiskIndicator.from_dict(i) for i in data.get("riskIndicators", [])),
            risk_score=int(score["score"]),
            risk_grade=score["grade"],
            overall_risk=RiskLevel(data["overallRisk"]),
            token_data=TokenData.from_dict(token) if isinstance(token, dict) else None,
            dex_data=DexData.from_dict(dex) if isinstance(dex, dict) else None,
            params_version=data.get("paramsVersion", PARAMS_VERSION),
        )


@dataclass(frozen=True)
class StepEvent:
    """One lifecycle message on the outbound stream."""

    type: StepType
    step_id: str | None = None
    step_name: str | None = None
    duration_ms: int | None = None
    data: dict[str, Any] | None = None
    error: str | None = None
    params_checked: int | None = None
    params_triggered: int | None = None
    detection_mode: DetectionMode | None = None
    ai_analysis: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        raw = {
            "type": self.type.value,
            "stepId": self.step_id,
            "stepName": self.step_name,
            "duration": self.duration_ms,
            "data": self.data,
            "error": self.error,
            "paramsChecked": self.params_checked,
            "paramsTriggered": self.params_triggered,
            "detectionMode": self.detection_mode.value if self.detection_mode else None,
            "aiAnalysis": self.ai_analysis,
        }
        return {k: v for k, v in raw.items() if v is not None}

    def to_json_line(self) -> str:
        """Serialize as one newline-terminated JSON line (NDJSON)."""
        return json.dumps(self.to_dict(), separators=(",", ":"), default=str) + "\n"
