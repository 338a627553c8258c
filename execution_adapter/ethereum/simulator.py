"""Summarise planned transactions without network calls."""

from typing import Iterable

from consolidation_engine.models import SignedTransactionRecord

from .models import DryRunResult, DryRunTxResult


class SimulationError(ValueError):
    """Raised when a dry-run summary cannot be produced."""


def simulate(records: Iterable[SignedTransactionRecord]) -> DryRunResult:
    tx_results = []
    total_gas = 0
    total_fee = 0
    total_value = 0

    for record in records:
        _validate_record(record)
        tx = record.transaction
        notes = ("Token transfer call.",) if tx.data else ("Native transfer.",)
        tx_results.append(
            DryRunTxResult(
                originator=record.originator,
                nonce=tx.nonce,
                to_address=tx.to_address,
                gas_limit=tx.gas_limit,
                max_fee_wei=tx.fee,
                value_wei=tx.value,
                tx_hash=record.tx_hash,
                notes=notes,
            )
        )
        total_gas += tx.gas_limit
        total_fee += tx.fee
        total_value += tx.value

    return DryRunResult(
        tx_results=tuple(tx_results),
        total_gas_limit=total_gas,
        total_max_fee_wei=total_fee,
        total_value_wei=total_value,
        notes=("Dry-run only; nothing was broadcast.",),
    )


def _validate_record(record: SignedTransactionRecord) -> None:
    tx = record.transaction
    if not tx.to_address:
        raise SimulationError("Transaction must include a target address.")
    if tx.value < 0:
        raise SimulationError("Transaction value must be non-negative.")
    if not record.tx_hash.startswith("0x"):
        raise SimulationError("Transaction hash must be hex-prefixed.")
