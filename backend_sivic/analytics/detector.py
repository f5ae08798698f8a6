"""
Shared step runner for the token and program detectors.

Responsibilities:
- Run an ordered table of steps, one at a time, as an async generator of
  StepEvents (step_start, then exactly one of step_complete / step_error).
- Mark each step's parameters checked as soon as the step starts, so a failed
  collaborator still counts as "evidence sought".
- Thread facts explicitly: a step handler receives the current facts and
  returns (new_facts, summary). Failed steps leave facts unchanged.
- Stop at a step boundary when the caller reports a disconnect.

A detector instance serves exactly one run; it owns its parameter sets and
indicator ledger.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from backend_sivic.analysis_engine.indicators import IndicatorLedger, RiskIndicator, Severity
from backend_sivic.analysis_engine.models import DetectionMode, DetectionResult, StepEvent, StepType
from backend_sivic.analysis_engine.params import ParamCounts, ParameterSet, ParamScope
from backend_sivic.analysis_engine.scorer import compute_risk_score, grade_for_score, overall_risk
from backend_sivic.core.exceptions import SivicError
from backend_sivic.sivic_logging import bind_address, get_logger

logger = get_logger(__name__)

FactsT = TypeVar("FactsT")
DisconnectCheck = Callable[[], Awaitable[bool]]


@dataclass(frozen=True)
class StepSpec:
    """One row of a detector's step table."""

    step_id: str
    step_name: str
    on_chain: tuple[Enum, ...] = ()
    off_chain: tuple[Enum, ...] = ()


class Detector(Generic[FactsT]):
    """
    Base class; subclasses set `mode` and `steps` and implement one
    `_step_<step_id>(facts) -> (facts, summary)` coroutine per step.
    """

    mode: DetectionMode
    steps: tuple[StepSpec, ...] = ()

    def __init__(
        self,
        address: str,
        facts: FactsT,
        on_chain: ParameterSet,
        off_chain: ParameterSet,
    ) -> None:
        self.address = address
        self.log = bind_address(logger, address)
        self.facts = facts
        self.on_chain = on_chain
        self.off_chain = off_chain
        self.ledger = IndicatorLedger()
        self.cancelled = False
        self._result: DetectionResult | None = None

    @property
    def result(self) -> DetectionResult | None:
        """Set once run() has gone through every step; None before or when cancelled."""
        return self._result

    def counts(self) -> ParamCounts:
        return self.on_chain.counts() + self.off_chain.counts()

    async def run(self, is_disconnected: DisconnectCheck | None = None) -> AsyncIterator[StepEvent]:
        for spec in self.steps:
            if is_disconnected is not None and await is_disconnected():
                self.cancelled = True
                self.log.info("detector_cancelled", mode=self.mode.value, next_step=spec.step_id)
                return
            yield self._event(StepType.STEP_START, spec, step_name=spec.step_name)
            self.on_chain.check(*spec.on_chain)
            self.off_chain.check(*spec.off_chain)
            started = time.monotonic()
            handler = getattr(self, f"_step_{spec.step_id}")
            try:
                self.facts, summary = await handler(self.facts)
            except SivicError as e:
                self.log.warning("detector_step_failed", step_id=spec.step_id, error=e.message)
                yield self._event(StepType.STEP_ERROR, spec, duration_ms=_elapsed_ms(started), error=str(e))
                continue
            except Exception as e:
                self.log.exception("detector_step_error", step_id=spec.step_id, error=str(e))
                yield self._event(
                    StepType.STEP_ERROR, spec, duration_ms=_elapsed_ms(started), error=str(e) or type(e).__name__
                )
                continue
            duration_ms = _elapsed_ms(started)
            self.log.debug("detector_step_complete", step_id=spec.step_id, duration_ms=duration_ms)
            yield self._event(StepType.STEP_COMPLETE, spec, duration_ms=duration_ms, data=summary)

        self._result = self.build_result()
        self.log.info(
            "detector_run_complete",
            mode=self.mode.value,
            score=self._result.risk_score,
            indicators=len(self.ledger),
        )

    def _event(self, type_: StepType, spec: StepSpec, **kwargs: Any) -> StepEvent:
        counts = self.counts()
        return StepEvent(
            type=type_,
            step_id=spec.step_id,
            params_checked=counts.checked,
            params_triggered=counts.triggered,
            detection_mode=self.mode,
            **kwargs,
        )

    def flag(
        self,
        param: Enum,
        param_value: str | None,
        *,
        indicator_id: str,
        category: str,
        name: str,
        severity: Severity,
        description: str,
        value: str | None = None,
    ) -> RiskIndicator:
        """
        Trigger `param` and append the matching indicator.

        The parameter keeps its first recorded value; the indicator always
        carries `value` (or `param_value` when omitted).
        """
        if param in self.on_chain:
            params, scope = self.on_chain, ParamScope.ON_CHAIN
        else:
            params, scope = self.off_chain, ParamScope.OFF_CHAIN
        params.trigger(param, param_value)
        indicator = RiskIndicator(
            id=indicator_id,
            category=category,
            name=name,
            severity=severity,
            value=value if value is not None else (param_value or ""),
            description=description,
            param_type=scope,
        )
        self.ledger.add(indicator)
        self.log.debug(
            "detector_param_triggered",
            param=param.value,
            indicator=indicator_id,
            severity=severity.value,
        )
        return indicator

    def build_result(self) -> DetectionResult:
        """Freeze the current state into a DetectionResult (detached copies)."""
        indicators = self.ledger.snapshot()
        score = compute_risk_score(indicators)
        on_enum, off_enum = self.on_chain.names, self.off_chain.names
        return DetectionResult(
            address=self.address,
            detection_mode=self.mode,
            on_chain_params=ParameterSet.from_dict(on_enum, self.on_chain.to_dict()),
            off_chain_params=ParameterSet.from_dict(off_enum, self.off_chain.to_dict()),
            risk_indicators=indicators,
            risk_score=score,
            risk_grade=grade_for_score(score),
            overall_risk=overall_risk(score, indicators),
            **self._result_payload(),
        )

    def _result_payload(self) -> dict[str, Any]:
        raise NotImplementedError


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def pct(value: float) -> str:
    """Display form used in parameter values: one decimal and a percent sign."""
    return f"{value:.1f}%"


def usd(value: float) -> str:
    return f"${value:.2f}"
