"""
Risk score computation: severity weights and aggregation.

Responsibilities:
- Map an indicator ledger to a 0-100 risk score (higher is riskier).
- Map a score to a letter grade and a qualitative risk level.

Pure functions: no I/O, no globals read, independent of indicator order.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from backend_sivic.analysis_engine.indicators import RiskIndicator, Severity

# Points added per indicator severity (explainable, rule-based)
SEVERITY_WEIGHT = {
    Severity.CRITICAL: 50,
    Severity.HIGH: 30,
    Severity.MEDIUM: 15,
    Severity.LOW: 5,
}

# Upper score bound for each grade, checked in order
GRADE_BOUNDS = (
    (20, "A"),
    (40, "B"),
    (60, "C"),
    (80, "D"),
)


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def compute_risk_score(
    indicators: Iterable[RiskIndicator],
    *,
    min_score: int = 0,
    max_score: int = 100,
) -> int:
    """
    Sum a fixed weight per indicator and clamp to [min_score, max_score].

    An empty ledger scores 0. Five critical indicators score 100, not 250.
    """
    score = sum(SEVERITY_WEIGHT[i.severity] for i in indicators)
    return max(min_score, min(max_score, score))


def grade_for_score(score: int) -> str:
    """A <= 20, B <= 40, C <= 60, D <= 80, F above."""
    for bound, grade in GRADE_BOUNDS:
        if score <= bound:
            return grade
    return "F"


def overall_risk(score: int, indicators: Iterable[RiskIndicator] = ()) -> RiskLevel:
    """
    Qualitative level from the score; any critical indicator forces CRITICAL.
    """
    if any(i.severity == Severity.CRITICAL for i in indicators) or score >= 50:
        return RiskLevel.CRITICAL
    if score >= 30:
        return RiskLevel.HIGH
    if score >= 10:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
