"""
Tests for the program (dex) detector.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

from backend_sivic.analysis_engine.models import StepType
from backend_sivic.analysis_engine.params import ProgramOffChainParam, ProgramOnChainParam
from backend_sivic.analytics.program_detector import ProgramDetector, ProgramThresholds
from backend_sivic.providers.models import DexPair, DexSummary
from backend_sivic.solana_rpc.models import ProgramDataInfo, SignatureInfo

RAYDIUM_AMM = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"
UNKNOWN_PROGRAM = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
AUTHORITY = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"


def _run(detector: ProgramDetector) -> list:
    async def collect():
        return [event async for event in detector.run()]

    return asyncio.run(collect())


def _signatures(total: int, failed: int) -> list[SignatureInfo]:
    return [
        SignatureInfo(
            signature=f"sig{i}",
            slot=i,
            err={"InstructionError": [0, "Custom"]} if i < failed else None,
            block_time=None,
            memo=None,
            confirmation_status="finalized",
        )
        for i in range(total)
    ]


def _pair(liquidity: float, volume: float, change_1h: float = 0.0) -> DexPair:
    return DexPair.model_validate(
        {
            "dexId": "raydium",
            "liquidity": {"usd": liquidity},
            "volume": {"h24": volume},
            "priceChange": {"h1": change_1h},
        }
    )


def _summary(*pairs: DexPair) -> DexSummary:
    return DexSummary(
        total_pairs=len(pairs),
        total_liquidity=sum(p.liquidity_usd for p in pairs),
        total_volume_24h=sum(p.volume_24h for p in pairs),
        dexes=sorted({p.dex_id for p in pairs}),
        pairs=list(pairs),
    )


def _ids(detector: ProgramDetector) -> set[str]:
    return {i.id for i in detector.ledger}


def test_immutable_known_program_is_clean(collaborators, program_account_factory):
    """No authority and 0% errors: no upgrade indicators, all 19 on-chain checked."""
    collaborators.rpc.get_signatures_for_address = AsyncMock(return_value=_signatures(50, 0))
    detector = ProgramDetector(
        RAYDIUM_AMM, program_account_factory(), collaborators, program_data=ProgramDataInfo(authority=None)
    )
    events = _run(detector)

    result = detector.result
    assert result.risk_indicators == ()
    assert result.risk_score == 0
    assert result.risk_grade == "A"
    assert result.on_chain_counts.checked == 19
    assert result.off_chain_counts.checked == 12
    assert not result.on_chain_params[ProgramOnChainParam.PROGRAM_UPGRADE_VULNS].triggered
    assert result.dex_data.program_name == "Raydium AMM"
    assert result.dex_data.is_upgradeable is False
    assert [e.step_id for e in events if e.type == StepType.STEP_START] == [
        "program_info",
        "tx_volume",
        "dex_pairs",
        "mev_analysis",
        "account_activity",
        "off_chain",
    ]
    info = next(e for e in events if e.step_id == "program_info" and e.type == StepType.STEP_COMPLETE)
    assert info.data == {"isUpgradeable": False, "upgradeAuthority": "Immutable"}


def test_upgradeable_program(collaborators, program_account_factory):
    """A present upgrade authority raises upgradeable_program (high)."""
    detector = ProgramDetector(
        RAYDIUM_AMM, program_account_factory(), collaborators, program_data=ProgramDataInfo(authority=AUTHORITY)
    )
    _run(detector)
    by_id = {i.id: i for i in detector.ledger}
    assert by_id["upgradeable_program"].severity.value == "high"
    params = detector.result.on_chain_params
    assert params[ProgramOnChainParam.PROGRAM_UPGRADE_VULNS].value == AUTHORITY
    assert detector.result.dex_data.upgrade_authority == AUTHORITY


def test_high_error_rate_keeps_first_param_value(collaborators, program_account_factory):
    """Both indicators are recorded; the shared parameter keeps the authority value."""
    collaborators.rpc.get_signatures_for_address = AsyncMock(return_value=_signatures(100, 20))
    detector = ProgramDetector(
        RAYDIUM_AMM, program_account_factory(), collaborators, program_data=ProgramDataInfo(authority=AUTHORITY)
    )
    _run(detector)
    collaborators.rpc.get_signatures_for_address.assert_awaited_once_with(RAYDIUM_AMM, 1000)
    by_id = {i.id: i for i in detector.ledger}
    assert {"upgradeable_program", "high_error_rate"} <= set(by_id)
    assert by_id["high_error_rate"].value == "20.0%"
    params = detector.result.on_chain_params
    assert params[ProgramOnChainParam.PROGRAM_UPGRADE_VULNS].value == AUTHORITY
    assert detector.result.on_chain_counts.triggered == 1


def test_error_rate_alone_sets_param_value(collaborators, program_account_factory):
    """Without an authority the error-rate trigger records "X% errors"."""
    collaborators.rpc.get_signatures_for_address = AsyncMock(return_value=_signatures(10, 1))
    detector = ProgramDetector(RAYDIUM_AMM, program_account_factory(), collaborators)
    _run(detector)
    params = detector.result.on_chain_params
    assert params[ProgramOnChainParam.PROGRAM_UPGRADE_VULNS].value == "10.0% errors"


def test_volume_to_liquidity_and_price_pump(collaborators, program_account_factory):
    """Volume above twice liquidity is medium; a 1h move above 50% is high."""
    collaborators.dex.pairs = AsyncMock(return_value=_summary(_pair(100_000, 150_000, 10), _pair(50_000, 200_000, -75)))
    detector = ProgramDetector(RAYDIUM_AMM, program_account_factory(), collaborators)
    events = _run(detector)

    by_id = {i.id: i for i in detector.ledger}
    assert by_id["high_volume_to_liquidity"].severity.value == "medium"
    assert by_id["high_volume_to_liquidity"].value == "233%"
    assert by_id["price_pump"].value == "75.0% in 1h"
    params = detector.result.on_chain_params
    assert params[ProgramOnChainParam.LARGE_VAULT_WITHDRAWALS].value == "Vol: $350k / Liq: $150k"
    assert params[ProgramOnChainParam.PRICE_PUMPS].value == "75.0%"
    dex_data = detector.result.dex_data
    assert dex_data.tvl == 150_000
    assert dex_data.pair_count == 2
    done = next(e for e in events if e.step_id == "dex_pairs" and e.type == StepType.STEP_COMPLETE)
    assert done.data == {"pairs": 2, "tvl": 150_000, "volume24h": 350_000}


def test_custom_thresholds(collaborators, program_account_factory):
    """A higher ratio threshold suppresses the volume indicator."""
    collaborators.dex.pairs = AsyncMock(return_value=_summary(_pair(100_000, 250_000)))
    detector = ProgramDetector(
        RAYDIUM_AMM,
        program_account_factory(),
        collaborators,
        thresholds=ProgramThresholds(volume_to_liquidity_ratio=5.0),
    )
    _run(detector)
    assert "high_volume_to_liquidity" not in _ids(detector)


def test_unknown_program(collaborators, program_account_factory):
    """Programs outside the known registry raise unknown_program off-chain."""
    detector = ProgramDetector(UNKNOWN_PROGRAM, program_account_factory(UNKNOWN_PROGRAM), collaborators)
    _run(detector)
    by_id = {i.id: i for i in detector.ledger}
    assert by_id["unknown_program"].param_type.value == "off-chain"
    params = detector.result.off_chain_params
    assert params[ProgramOffChainParam.AUDIT_SIMULATION_RESULTS].triggered
    assert detector.result.dex_data.program_name is None


def test_placeholders_are_checked_but_not_evaluated(collaborators, program_account_factory):
    """Placeholders count as checked; only real evidence sources count as evaluated."""
    detector = ProgramDetector(RAYDIUM_AMM, program_account_factory(), collaborators)
    _run(detector)
    result = detector.result
    assert result.on_chain_params[ProgramOnChainParam.SANDWICH_ATTACKS].placeholder
    assert result.on_chain_params[ProgramOnChainParam.SANDWICH_ATTACKS].checked
    assert not result.on_chain_params[ProgramOnChainParam.PRICE_PUMPS].placeholder
    assert result.on_chain_counts.evaluated == 3
    assert result.off_chain_counts.evaluated == 1
    assert result.to_dict()["evaluatedParams"] == 4


def test_rpc_failure_is_step_local(collaborators, program_account_factory):
    """A failing signature fetch errors tx_volume only; later steps still run."""
    collaborators.rpc.get_signatures_for_address = AsyncMock(side_effect=RuntimeError("rpc down"))
    detector = ProgramDetector(RAYDIUM_AMM, program_account_factory(), collaborators)
    events = _run(detector)
    errors = [e for e in events if e.type == StepType.STEP_ERROR]
    assert [e.step_id for e in errors] == ["tx_volume"]
    assert errors[0].error == "rpc down"
    assert detector.result.total_counts.checked == 31
