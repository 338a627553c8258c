from .calldata import TRANSFER_SELECTOR, encode_transfer_call
from .drain import drain_quote, plan_balance_drain
from .models import (
    TRANSFER_GAS,
    AccountState,
    KeyHandle,
    LedgerState,
    Phase,
    PhasePlan,
    SignedTransaction,
    SignedTransactionRecord,
    Token,
    UnsignedTransaction,
)
from .planner import ConsolidationPlanner
from .redistribution import plan_gas_redistribution
from .sweep import plan_token_sweep, sweep_order
from .transactions import Signer
from .validation import PlanValidationError, validate_ledger, validate_phase

__all__ = [
    "AccountState",
    "ConsolidationPlanner",
    "KeyHandle",
    "LedgerState",
    "Phase",
    "PhasePlan",
    "PlanValidationError",
    "SignedTransaction",
    "SignedTransactionRecord",
    "Signer",
    "TRANSFER_GAS",
    "TRANSFER_SELECTOR",
    "Token",
    "UnsignedTransaction",
    "drain_quote",
    "encode_transfer_call",
    "plan_balance_drain",
    "plan_gas_redistribution",
    "plan_token_sweep",
    "sweep_order",
    "validate_ledger",
    "validate_phase",
]
