"""
Tests for DetectionResult / StepEvent serialization.
"""

from __future__ import annotations

import json

from backend_sivic.analysis_engine.indicators import RiskIndicator, Severity
from backend_sivic.analysis_engine.models import (
    DetectionMode,
    DetectionResult,
    DexData,
    StepEvent,
    StepType,
    TokenData,
    TopHolder,
)
from backend_sivic.analysis_engine.params import (
    ParamScope,
    ProgramOnChainParam,
    TokenOnChainParam,
    program_parameter_sets,
    token_parameter_sets,
)
from backend_sivic.analysis_engine.scorer import RiskLevel

VALID_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
RAYDIUM_AMM = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"


def _token_result() -> DetectionResult:
    on_chain, off_chain = token_parameter_sets()
    on_chain.trigger(TokenOnChainParam.MASSIVE_MINTS, "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka")
    off_chain.check("rugPullMetrics")
    indicator = RiskIndicator(
        id="mint_authority_active",
        category="authority",
        name="Active Mint Authority",
        severity=Severity.CRITICAL,
        value="9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka",
        description="Token has active mint authority - unlimited supply possible",
        param_type=ParamScope.ON_CHAIN,
    )
    facts = TokenData(
        decimals=6,
        supply=1_000_000.0,
        dex_names=("raydium", "orca"),
        top_holders=(TopHolder(1, "holder1", "600000000000", 600000.0, 60.0),),
    )
    return DetectionResult(
        address=VALID_MINT,
        detection_mode=DetectionMode.TOKEN,
        on_chain_params=on_chain,
        off_chain_params=off_chain,
        risk_indicators=(indicator,),
        risk_score=50,
        risk_grade="C",
        overall_risk=RiskLevel.CRITICAL,
        token_data=facts,
    )


def test_result_round_trip_preserves_trigger_and_value():
    """Serializing and rebuilding keeps triggered and value exactly."""
    result = _token_result()
    wire = json.loads(json.dumps(result.to_dict()))
    rebuilt = DetectionResult.from_dict(wire)
    state = rebuilt.on_chain_params[TokenOnChainParam.MASSIVE_MINTS]
    assert state.triggered is True
    assert state.value == "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
    assert rebuilt.to_dict() == result.to_dict()
    assert rebuilt.token_data == result.token_data


def test_result_counts_in_dict():
    """Counts are derived from the parameter sets."""
    data = _token_result().to_dict()
    assert data["detectionMode"] == "token"
    assert data["onChainParamsChecked"] == 1
    assert data["offChainParamsChecked"] == 1
    assert data["totalParamsChecked"] == 2
    assert data["totalParamsTriggered"] == 1
    assert data["riskScore"] == {"score": 50, "grade": "C"}
    assert data["overallRisk"] == "critical"
    assert data["riskIndicators"][0]["paramType"] == "on-chain"
    assert data["tokenData"]["dexNames"] == ["raydium", "orca"]
    assert data["tokenData"]["topHolders"][0]["amountFormatted"] == 600000.0
    assert "dexData" not in data


def test_dex_result_round_trip():
    """Program results rebuild with the program parameter enumerations."""
    on_chain, off_chain = program_parameter_sets()
    on_chain.trigger(ProgramOnChainParam.PRICE_PUMPS, "75.0%")
    result = DetectionResult(
        address=RAYDIUM_AMM,
        detection_mode=DetectionMode.DEX,
        on_chain_params=on_chain,
        off_chain_params=off_chain,
        risk_indicators=(),
        risk_score=0,
        risk_grade="A",
        overall_risk=RiskLevel.LOW,
        dex_data=DexData(program_id=RAYDIUM_AMM, program_name="Raydium AMM", tvl=1000.0),
    )
    rebuilt = DetectionResult.from_dict(result.to_dict())
    assert rebuilt.dex_data == result.dex_data
    assert rebuilt.on_chain_params["pricePumps"].value == "75.0%"


def test_step_event_drops_none_fields():
    """Only populated fields are serialized, in camelCase."""
    event = StepEvent(type=StepType.STEP_START, step_id="holders", step_name="Analyzing Token Holders")
    assert event.to_dict() == {"type": "step_start", "stepId": "holders", "stepName": "Analyzing Token Holders"}


def test_step_event_json_line():
    """to_json_line produces one newline-terminated JSON object."""
    event = StepEvent(
        type=StepType.STEP_COMPLETE,
        step_id="holders",
        duration_ms=12,
        data={"topHolders": 3},
        params_checked=10,
        params_triggered=1,
        detection_mode=DetectionMode.TOKEN,
    )
    line = event.to_json_line()
    assert line.endswith("\n")
    assert line.count("\n") == 1
    payload = json.loads(line)
    assert payload["duration"] == 12
    assert payload["detectionMode"] == "token"
    assert payload["paramsChecked"] == 10
