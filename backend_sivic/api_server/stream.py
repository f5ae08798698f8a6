"""
Streaming coordinator: one end-to-end analysis as a sequence of StepEvents.

Responsibilities:
- Look up the account; a missing account (or failed lookup) ends the run
  with a single `complete` event carrying {error, address}.
- Classify the account, fetch token metadata or program data, then relay
  every event of the chosen detector as soon as it is produced.
- Optionally attach an AI insight to the report.
- Finish with `data_update` and `complete`, both carrying the final report.

Events are yielded one at a time; nothing is buffered. The caller's
`is_disconnected` check is polled at every step boundary.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from typing import Any

from backend_sivic.analysis_engine.models import (
    DetectionMode,
    DetectionResult,
    DexData,
    StepEvent,
    StepType,
    TokenData,
)
from backend_sivic.analysis_engine.params import TOTAL_PARAMS_PER_MODE
from backend_sivic.analytics.classifier import account_type_label, classify
from backend_sivic.analytics.detector import DisconnectCheck
from backend_sivic.analytics.program_detector import ProgramDetector
from backend_sivic.analytics.token_detector import TokenDetector
from backend_sivic.core.exceptions import AccountNotFoundError
from backend_sivic.providers import Collaborators
from backend_sivic.providers.models import TokenMetadata
from backend_sivic.sivic_logging import get_logger, short_address
from backend_sivic.solana_rpc.models import AccountInfo, ProgramDataInfo

logger = get_logger(__name__)


def _ms_since(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


async def analyze_stream(
    address: str,
    collaborators: Collaborators,
    *,
    enable_ai: bool = False,
    is_disconnected: DisconnectCheck | None = None,
) -> AsyncIterator[StepEvent]:
    """
    Run the full analysis for an already-validated address.

    Every step yields at most one step_start followed by exactly one
    step_complete or step_error; the run ends with one `complete` event
    unless the caller disconnects first.
    """
    started = time.monotonic()
    short = short_address(address)

    async def gone() -> bool:
        if is_disconnected is not None and await is_disconnected():
            logger.info("analysis_cancelled", address=short)
            return True
        return False

    try:
        account = await collaborators.rpc.get_account_info(address)
        if account is None:
            raise AccountNotFoundError(address)
    except Exception as e:
        logger.warning("analysis_account_lookup_failed", address=short, error=str(e))
        yield StepEvent(type=StepType.COMPLETE, data={"error": str(e), "address": address})
        return

    mode = classify(account)
    logger.info("analysis_started", address=short, mode=mode.value, owner=account.owner)
    yield StepEvent(
        type=StepType.STEP_START,
        step_id="account_type",
        step_name="Determining Account Type",
        detection_mode=mode,
    )
    yield StepEvent(
        type=StepType.STEP_COMPLETE,
        step_id="account_type",
        duration_ms=_ms_since(started),
        data={
            "accountType": account_type_label(account),
            "detectionMode": mode.value,
            "totalParams": TOTAL_PARAMS_PER_MODE,
        },
        detection_mode=mode,
    )

    if await gone():
        return

    metadata = TokenMetadata()
    program_data: ProgramDataInfo | None = None
    if mode is DetectionMode.TOKEN:
        step_started = time.monotonic()
        yield StepEvent(
            type=StepType.STEP_START,
            step_id="token_metadata",
            step_name="Fetching Token Metadata",
            detection_mode=mode,
        )
        try:
            metadata = await collaborators.metadata.token_metadata(address) or metadata
        except Exception as e:
            logger.warning("analysis_metadata_failed", address=short, error=str(e))
            yield StepEvent(
                type=StepType.STEP_ERROR,
                step_id="token_metadata",
                duration_ms=_ms_since(step_started),
                error="Metadata fetch failed",
                detection_mode=mode,
            )
        else:
            yield StepEvent(
                type=StepType.STEP_COMPLETE,
                step_id="token_metadata",
                duration_ms=_ms_since(step_started),
                data={"name": metadata.name, "symbol": metadata.symbol},
                detection_mode=mode,
            )
        detector: TokenDetector | ProgramDetector = TokenDetector(address, account, collaborators)
    else:
        program_data_address = account.program_data_address
        if program_data_address:
            step_started = time.monotonic()
            yield StepEvent(
                type=StepType.STEP_START,
                step_id="program_data",
                step_name="Fetching Program Data",
                detection_mode=mode,
            )
            try:
                program_data = await collaborators.rpc.get_program_data(program_data_address)
            except Exception as e:
                logger.warning("analysis_program_data_failed", address=short, error=str(e))
                yield StepEvent(
                    type=StepType.STEP_ERROR,
                    step_id="program_data",
                    duration_ms=_ms_since(step_started),
                    error="Program data fetch failed",
                    detection_mode=mode,
                )
            else:
                authority = program_data.authority if program_data else None
                yield StepEvent(
                    type=StepType.STEP_COMPLETE,
                    step_id="program_data",
                    duration_ms=_ms_since(step_started),
                    data={"upgradeAuthority": authority or "Immutable"},
                    detection_mode=mode,
                )
        detector = ProgramDetector(address, account, collaborators, program_data)

    async for event in detector.run(is_disconnected):
        yield event

    result = detector.result
    if result is None:
        return

    if mode is DetectionMode.TOKEN:
        report = build_token_report(result, account, metadata)
    else:
        report = build_program_report(result, account)

    if enable_ai and collaborators.ai is not None and collaborators.ai.configured:
        if await gone():
            return
        step_started = time.monotonic()
        yield StepEvent(
            type=StepType.STEP_START,
            step_id="ai_analysis",
            step_name="Generating AI Insight",
            detection_mode=mode,
        )
        error: str | None = None
        try:
            insight = await collaborators.ai.security_insight(report)
        except Exception as e:
            logger.warning("analysis_ai_failed", address=short, error=str(e))
            insight, error = None, str(e)
        if insight is None:
            yield StepEvent(
                type=StepType.STEP_ERROR,
                step_id="ai_analysis",
                duration_ms=_ms_since(step_started),
                error=error or "AI analysis unavailable",
                detection_mode=mode,
            )
        else:
            report["aiAnalysis"] = insight.to_dict()
            yield StepEvent(
                type=StepType.STEP_COMPLETE,
                step_id="ai_analysis",
                duration_ms=_ms_since(step_started),
                data={"riskAssessment": insight.risk_assessment},
                detection_mode=mode,
            )

    report["totalDuration"] = _ms_since(started)
    totals = result.total_counts
    logger.info(
        "analysis_complete",
        address=short,
        mode=mode.value,
        score=result.risk_score,
        params_checked=totals.checked,
        params_triggered=totals.triggered,
        duration_ms=report["totalDuration"],
    )
    yield StepEvent(type=StepType.DATA_UPDATE, data=report, detection_mode=mode)
    yield StepEvent(
        type=StepType.COMPLETE,
        data=report,
        params_checked=totals.checked,
        params_triggered=totals.triggered,
        detection_mode=mode,
        ai_analysis=report.get("aiAnalysis"),
    )


async def analyze_once(address: str, collaborators: Collaborators, *, enable_ai: bool = False) -> dict[str, Any]:
    """Drain analyze_stream and return the data of its `complete` event."""
    final: dict[str, Any] = {"error": "Analysis did not complete", "address": address}
    async for event in analyze_stream(address, collaborators, enable_ai=enable_ai):
        if event.type is StepType.COMPLETE and event.data is not None:
            final = event.data
    return final


def build_token_report(result: DetectionResult, account: AccountInfo, metadata: TokenMetadata) -> dict[str, Any]:
    """Serialized result plus the token presentation sections."""
    report = result.to_dict()
    facts = result.token_data or TokenData()
    report.update(
        {
            "type": "token",
            "profileSummary": {
                "tokenName": metadata.name,
                "tokenSymbol": metadata.symbol,
                "imageUrl": metadata.image_url,
                "decimals": facts.decimals,
                "mintAuthority": facts.mint_authority,
                "freezeAuthority": facts.freeze_authority,
                "ageInDays": facts.age_in_days,
                "createdAt": facts.created_at,
            },
            "marketOverview": {
                "currentSupply": facts.supply,
                "decimals": facts.decimals,
                "price": facts.price,
                "priceChange24h": facts.price_change_24h,
                "marketCap": facts.market_cap,
                "volume24h": facts.volume_24h,
                "liquidity": facts.liquidity,
                "holders": facts.holders,
            },
            "securityData": {
                "creatorAddress": facts.creator_address,
                "creatorPercentage": facts.creator_percentage,
                "isLpBurned": facts.lp_burned,
                "lpBurnedPercent": facts.lp_burned_percent,
                "isMintable": bool(facts.mint_authority),
                "isFreezable": bool(facts.freeze_authority),
                "rugCheckScore": facts.rug_check_score,
                "rugCheckRiskLevel": facts.rug_check_risk_level,
            },
            "tradingData": {
                "buySlippage": facts.buy_slippage,
                "sellSlippage": facts.sell_slippage,
                "isHoneypot": facts.is_honeypot,
                "dexPairs": facts.dex_pairs,
                "dexNames": list(facts.dex_names),
            },
            "topHolders": [h.to_dict() for h in facts.top_holders],
            "misc": {"ownerProgram": account.owner},
        }
    )
    return report


def build_program_report(result: DetectionResult, account: AccountInfo) -> dict[str, Any]:
    """Serialized result plus the program presentation sections."""
    report = result.to_dict()
    facts = result.dex_data or DexData(program_id=result.address)
    report.update(
        {
            "type": "program",
            "profileSummary": {
                "programId": facts.program_id,
                "programName": facts.program_name or "Unknown Program",
                "isUpgradeable": facts.is_upgradeable,
                "upgradeAuthority": facts.upgrade_authority,
                "ownerProgram": account.owner,
            },
            # Facts plus the display alias errorRate.
            "dexData": {**report["dexData"], "errorRate": facts.recent_error_rate},
            "misc": {"ownerProgram": account.owner},
        }
    )
    return report
