"""Execution modes and pipeline outcomes."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from consolidation_engine.models import LedgerState, Phase, PhasePlan
from execution_adapter.ethereum.models import DryRunResult


class ExecutionMode(Enum):
    SIMULATE = "SIMULATE"
    BROADCAST = "BROADCAST"


@dataclass(frozen=True)
class PhaseOutcome:
    plan: PhasePlan
    sent: Tuple[str, ...] = ()
    failed: Tuple[str, ...] = ()
    dry_run: Optional[DryRunResult] = None

    @property
    def phase(self) -> Phase:
        return self.plan.phase


@dataclass(frozen=True)
class ConsolidationReport:
    mode: ExecutionMode
    gas_price: int
    snapshot: LedgerState
    phases: Tuple[PhaseOutcome, ...]
    ledger: LedgerState

    def outcome(self, phase: Phase) -> PhaseOutcome:
        for outcome in self.phases:
            if outcome.phase == phase:
                return outcome
        raise KeyError(f"No outcome for {phase.value}")
