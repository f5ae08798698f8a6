"""
Parameter registry: the closed set of named checks each detector evaluates.

Two account types, each split into on-chain and off-chain enumerations:
- token: 18 on-chain + 13 off-chain
- program (dex): 19 on-chain + 12 off-chain

Names never overlap between account types. Every run creates fresh
ParameterSets in the default (unchecked, untriggered) state.

"checked" means evidence was sought, not that it was found. Parameters with
no evidence source yet are flagged placeholder=True; they still count as
checked so the 31-parameter total holds, and evaluated counts exclude them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

PARAMS_VERSION = "2"
TOTAL_PARAMS_PER_MODE = 31

ParamName = str | Enum


class ParamScope(str, Enum):
    ON_CHAIN = "on-chain"
    OFF_CHAIN = "off-chain"


class TokenOnChainParam(str, Enum):
    MASSIVE_MINTS = "massiveMints"
    GOVERNANCE_EXPLOITS = "governanceExploits"
    BONDING_CURVE_DISTORTIONS = "bondingCurveDistortions"
    ASSET_FREEZES = "assetFreezes"
    WALLET_DRAINS = "walletDrains"
    OVER_BORROWING = "overBorrowing"
    ZK_PROOF_ANOMALIES = "zkProofAnomalies"
    RACE_CONDITIONS = "raceConditions"
    SIGNER_CHECK_FAILURES = "signerCheckFailures"
    TREASURY_DRAINS = "treasuryDrains"
    UNAUTHORIZED_WITHDRAWALS = "unauthorizedWithdrawals"
    SLOW_DRAIN_PATTERNS = "slowDrainPatterns"
    VICTIM_WALLET_SPIKES = "victimWalletSpikes"
    TOKEN_SUPPLY_INFLATION = "tokenSupplyInflation"
    APPROVAL_HIJACKING = "approvalHijacking"
    FAILED_PROJECT_SIGNATURES = "failedProjectSignatures"
    ACCOUNT_IMPERSONATION = "accountImpersonation"
    HARDWARE_WALLET_BREACHES = "hardwareWalletBreaches"


class TokenOffChainParam(str, Enum):
    KEY_LEAK_INDICATORS = "keyLeakIndicators"
    DAO_ENGAGEMENT_ALERTS = "daoEngagementAlerts"
    ECONOMIC_MODEL_STRESS = "economicModelStress"
    AUDIT_GAP_WARNINGS = "auditGapWarnings"
    CENTRALIZATION_WARNINGS = "centralizationWarnings"
    PHISHING_TX_CLUSTERS = "phishingTxClusters"
    MALWARE_APP_INDICATORS = "malwareAppIndicators"
    AI_PACKAGE_ALERTS = "aiPackageAlerts"
    RUG_PULL_METRICS = "rugPullMetrics"
    DEEPFAKE_SIGNALS = "deepfakeSignals"
    SOCIAL_MEDIA_SIGNALS = "socialMediaSignals"
    USER_REPORT_AGGREGATION = "userReportAggregation"
    VICTIM_REPORT_ANALYSIS = "victimReportAnalysis"


class ProgramOnChainParam(str, Enum):
    FLASH_LOAN_PATTERNS = "flashLoanPatterns"
    ORACLE_FEED_DISCREPANCIES = "oracleFeedDiscrepancies"
    UNAUTHORIZED_ADMIN_WITHDRAWALS = "unauthorizedAdminWithdrawals"
    PRICE_PUMPS = "pricePumps"
    BRIDGE_TRANSFER_ANOMALIES = "bridgeTransferAnomalies"
    TICK_ACCOUNT_CREATIONS = "tickAccountCreations"
    WALLET_APPROVAL_SPIKES = "walletApprovalSpikes"
    LARGE_VAULT_WITHDRAWALS = "largeVaultWithdrawals"
    TRANSACTION_VOLUME_SURGES = "transactionVolumeSurges"
    SANDWICH_ATTACKS = "sandwichAttacks"
    ROUNDING_ERRORS = "roundingErrors"
    HOT_WALLET_DRAINS = "hotWalletDrains"
    INSIDER_WALLET_CLUSTERS = "insiderWalletClusters"
    RUG_PULL_SIGNATURES = "rugPullSignatures"
    MALICIOUS_TX_APPROVALS = "maliciousTxApprovals"
    MEV_BOT_EXPLOITATION = "mevBotExploitation"
    CROSS_CHAIN_BRIDGE_ANOMALIES = "crossChainBridgeAnomalies"
    FEE_RECOVERY_FAILURES = "feeRecoveryFailures"
    PROGRAM_UPGRADE_VULNS = "programUpgradeVulns"


class ProgramOffChainParam(str, Enum):
    VALIDATOR_CLIENT_MONITORING = "validatorClientMonitoring"
    SOCIAL_MEDIA_SIGNALS = "socialMediaSignals"
    BLOCK_ENGINE_LOGS = "blockEngineLogs"
    RPC_PROVIDER_ANOMALIES = "rpcProviderAnomalies"
    NEWS_RESEARCH_BUZZ = "newsResearchBuzz"
    AUDIT_SIMULATION_RESULTS = "auditSimulationResults"
    FORUM_VALIDATOR_DISCUSSIONS = "forumValidatorDiscussions"
    BOT_CONFIG_ALERTS = "botConfigAlerts"
    DEPENDENCY_SCANS = "dependencyScans"
    RESEARCH_REPORTS = "researchReports"
    SIMULATION_TOOLS = "simulationTools"
    VALIDATOR_COMMUNICATIONS = "validatorCommunications"


# Parameters that are marked checked but have no evidence source yet.
TOKEN_PLACEHOLDERS = frozenset({
    TokenOnChainParam.GOVERNANCE_EXPLOITS,
    TokenOnChainParam.BONDING_CURVE_DISTORTIONS,
    TokenOnChainParam.OVER_BORROWING,
    TokenOnChainParam.ZK_PROOF_ANOMALIES,
    TokenOnChainParam.SIGNER_CHECK_FAILURES,
    TokenOnChainParam.TREASURY_DRAINS,
    TokenOnChainParam.UNAUTHORIZED_WITHDRAWALS,
    TokenOnChainParam.TOKEN_SUPPLY_INFLATION,
    TokenOnChainParam.ACCOUNT_IMPERSONATION,
    TokenOnChainParam.HARDWARE_WALLET_BREACHES,
    TokenOffChainParam.KEY_LEAK_INDICATORS,
    TokenOffChainParam.DAO_ENGAGEMENT_ALERTS,
    TokenOffChainParam.AUDIT_GAP_WARNINGS,
    TokenOffChainParam.MALWARE_APP_INDICATORS,
    TokenOffChainParam.AI_PACKAGE_ALERTS,
    TokenOffChainParam.DEEPFAKE_SIGNALS,
    TokenOffChainParam.USER_REPORT_AGGREGATION,
    TokenOffChainParam.VICTIM_REPORT_ANALYSIS,
})

PROGRAM_PLACEHOLDERS = frozenset(
    {p for p in ProgramOnChainParam}
    - {
        ProgramOnChainParam.PROGRAM_UPGRADE_VULNS,
        ProgramOnChainParam.LARGE_VAULT_WITHDRAWALS,
        ProgramOnChainParam.PRICE_PUMPS,
    }
) | frozenset(
    {p for p in ProgramOffChainParam} - {ProgramOffChainParam.AUDIT_SIMULATION_RESULTS}
)


def _key(name: ParamName) -> str:
    return name.value if isinstance(name, Enum) else str(name)


@dataclass
class ParameterState:
    """
    Evaluation state of one named parameter.

    Invariant: triggered implies checked. The first trigger wins: later
    triggers on the same parameter keep the value already recorded.
    """

    checked: bool = False
    triggered: bool = False
    value: str | None = None
    placeholder: bool = False

    def mark_checked(self) -> None:
        self.checked = True

    def mark_triggered(self, value: str | None) -> bool:
        """Set checked+triggered; return False if already triggered."""
        self.checked = True
        if self.triggered:
            return False
        self.triggered = True
        self.value = value
        return True

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"checked": self.checked, "triggered": self.triggered}
        if self.value is not None:
            out["value"] = self.value
        if self.placeholder:
            out["placeholder"] = True
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParameterState":
        return cls(
            checked=bool(data.get("checked", False)),
            triggered=bool(data.get("triggered", False)),
            value=data.get("value"),
            placeholder=bool(data.get("placeholder", False)),
        )


@dataclass(frozen=True)
class ParamCounts:
    checked: int
    triggered: int
    total: int
    evaluated: int

    def __add__(self, other: "ParamCounts") -> "ParamCounts":
        return ParamCounts(
            checked=self.checked + other.checked,
            triggered=self.triggered + other.triggered,
            total=self.total + other.total,
            evaluated=self.evaluated + other.evaluated,
        )


class ParameterSet:
    """Fixed mapping from a closed enumeration of names to ParameterState."""

    def __init__(self, names: type[Enum], placeholders: frozenset = frozenset()) -> None:
        self.names = names
        marked = {_key(p) for p in placeholders}
        self._states: dict[str, ParameterState] = {
            member.value: ParameterState(placeholder=member.value in marked) for member in names
        }

    def __getitem__(self, name: ParamName) -> ParameterState:
        return self._states[_key(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, (str, Enum)) and _key(name) in self._states

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def items(self) -> Iterator[tuple[str, ParameterState]]:
        return iter(self._states.items())

    def check(self, *names: ParamName) -> None:
        for name in names:
            self[name].mark_checked()

    def trigger(self, name: ParamName, value: str | None) -> bool:
        return self[name].mark_triggered(value)

    def counts(self) -> ParamCounts:
        states = self._states.values()
        return ParamCounts(
            checked=sum(1 for s in states if s.checked),
            triggered=sum(1 for s in states if s.triggered),
            total=len(self._states),
            evaluated=sum(1 for s in states if s.checked and not s.placeholder),
        )

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {name: state.to_dict() for name, state in self._states.items()}

    @classmethod
    def from_dict(cls, names: type[Enum], data: dict[str, Any]) -> "ParameterSet":
        """Rebuild from to_dict() output; unknown names raise KeyError."""
        params = cls(names)
        for name, raw in data.items():
            if name not in params._states:
                raise KeyError(f"unknown parameter {name!r} for {names.__name__}")
            params._states[name] = ParameterState.from_dict(raw)
        return params


def token_parameter_sets() -> tuple[ParameterSet, ParameterSet]:
    """Fresh (on-chain, off-chain) sets for the token detector."""
    return (
        ParameterSet(TokenOnChainParam, TOKEN_PLACEHOLDERS),
        ParameterSet(TokenOffChainParam, TOKEN_PLACEHOLDERS),
    )


def program_parameter_sets() -> tuple[ParameterSet, ParameterSet]:
    """Fresh (on-chain, off-chain) sets for the program (dex) detector."""
    return (
        ParameterSet(ProgramOnChainParam, PROGRAM_PLACEHOLDERS),
        ParameterSet(ProgramOffChainParam, PROGRAM_PLACEHOLDERS),
    )
