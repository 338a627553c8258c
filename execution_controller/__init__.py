from .controller import (
    BalanceRefresher,
    Broadcaster,
    Confirmer,
    ConsolidationPipeline,
    ExecutionBlockedError,
)
from .modes import ConsolidationReport, ExecutionMode, PhaseOutcome

__all__ = [
    "BalanceRefresher",
    "Broadcaster",
    "Confirmer",
    "ConsolidationPipeline",
    "ConsolidationReport",
    "ExecutionBlockedError",
    "ExecutionMode",
    "PhaseOutcome",
]
