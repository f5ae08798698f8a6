"""
Risk indicators and the append-only ledger a detector run produces.

Each indicator is raised only as a side effect of a parameter becoming
triggered, is immutable once created, and keeps the (category, severity,
value, description) needed to explain it to a user.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from backend_sivic.analysis_engine.params import ParamScope


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"




@dataclass(frozen=True)
class RiskIndicator:
    """Single explainable finding."""

    id: str
    """Stable identifier, e.g. mint_authority_active."""
    category: str
    """authority | activity | holder | security | program"""
    name: str
    severity: Severity
    value: str
    """Observed value that crossed the threshold (formatted for display)."""
    description: str
    param_type: ParamScope

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "name": self.name,
            "severity": self.severity.value,
            "value": self.value,
            "description": self.description,
            "paramType": self.param_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RiskIndicator":
        return cls(
            id=data["id"],
            category=data["category"],
            name=data["name"],
            severity=Severity(data["severity"]),
            value=str(data.get("value", "")),
            description=data.get("description", ""),
            param_type=ParamScope(data["paramType"]),
        )


class IndicatorLedger:
    """Ordered, append-only list of indicators for one analysis run."""

    def __init__(self) -> None:
        self._items: list[RiskIndicator] = []

    def add(self, indicator: RiskIndicator) -> None:
        self._items.append(indicator)

    def __iter__(self) -> Iterator[RiskIndicator]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def snapshot(self) -> tuple[RiskIndicator, ...]:
        return tuple(self._items)
