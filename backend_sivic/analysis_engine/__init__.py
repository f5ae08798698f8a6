"""
Analysis engine: parameter registry, risk indicators, scoring and result models.
"""

from backend_sivic.analysis_engine.indicators import IndicatorLedger, RiskIndicator, Severity
from backend_sivic.analysis_engine.models import (
    DetectionMode,
    DetectionResult,
    DexData,
    StepEvent,
    StepType,
    TokenData,
    TopHolder,
)
from backend_sivic.analysis_engine.params import ParameterSet, ParameterState, ParamScope
from backend_sivic.analysis_engine.scorer import RiskLevel, compute_risk_score, grade_for_score, overall_risk

__all__ = [
    "DetectionMode",
    "DetectionResult",
    "DexData",
    "IndicatorLedger",
    "ParamScope",
    "ParameterSet",
    "ParameterState",
    "RiskIndicator",
    "RiskLevel",
    "Severity",
    "StepEvent",
    "StepType",
    "TokenData",
    "TopHolder",
    "compute_risk_score",
    "grade_for_score",
    "overall_risk",
]
