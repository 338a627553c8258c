from .adapter import BroadcastError, LedgerQueryError, Web3LedgerAdapter
from .models import ERC20_ABI, TRANSFER_EVENT_TOPIC, DryRunResult, DryRunTxResult
from .simulator import SimulationError, simulate

__all__ = [
    "BroadcastError",
    "DryRunResult",
    "DryRunTxResult",
    "ERC20_ABI",
    "LedgerQueryError",
    "SimulationError",
    "TRANSFER_EVENT_TOPIC",
    "Web3LedgerAdapter",
    "simulate",
]
