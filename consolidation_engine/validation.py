"""Hard validation rules for ledger snapshots and phase plans."""

from typing import Dict, List

from .models import LedgerState, PhasePlan, SignedTransactionRecord


class PlanValidationError(ValueError):
    """Raised when a ledger or a phase plan violates hard validation rules."""


def validate_ledger(ledger: LedgerState) -> None:
    seen = set()
    for account in ledger.accounts:
        if account.address in seen:
            raise PlanValidationError(f"Duplicate account {account.address}.")
        seen.add(account.address)
        if account.chain_id is None or account.chain_id <= 0:
            raise PlanValidationError(
                f"Chain id is not set for {account.address}; refusing to sign."
            )
        if account.balance < 0:
            raise PlanValidationError(f"Negative balance for {account.address}.")
        if account.nonce < 0:
            raise PlanValidationError(f"Negative nonce for {account.address}.")


def validate_phase(before: LedgerState, plan: PhasePlan) -> None:
    if set(before.addresses) != set(plan.ledger.addresses):
        raise PlanValidationError("Planning must not add or remove accounts.")

    by_originator: Dict[str, List[SignedTransactionRecord]] = {}
    for record in plan.records:
        if record.phase != plan.phase:
            raise PlanValidationError("Record phase does not match the plan phase.")
        _validate_record(before, record)
        by_originator.setdefault(record.originator, []).append(record)

    _validate_nonces(before, plan, by_originator)
    _validate_conservation(before, plan)


def _validate_record(before: LedgerState, record: SignedTransactionRecord) -> None:
    tx = record.transaction
    originator = before.get(record.originator)
    if tx.chain_id != originator.chain_id:
        raise PlanValidationError("Transaction chain id differs from its originator.")
    if tx.gas_price <= 0 or tx.gas_limit <= 0:
        raise PlanValidationError("Transactions must pay a positive fee.")
    if tx.data:
        if tx.value != 0:
            raise PlanValidationError("Token transfer calls must not carry value.")
    elif tx.value <= 0:
        raise PlanValidationError("Native transfers must move a positive amount.")


def _validate_nonces(
    before: LedgerState,
    plan: PhasePlan,
    by_originator: Dict[str, List[SignedTransactionRecord]],
) -> None:
    for account in before.accounts:
        records = by_originator.get(account.address, [])
        expected = list(range(account.nonce, account.nonce + len(records)))
        if [record.transaction.nonce for record in records] != expected:
            raise PlanValidationError(f"Nonces are not sequential for {account.address}.")
        if plan.ledger.get(account.address).nonce != account.nonce + len(records):
            raise PlanValidationError(f"Nonce was not advanced for {account.address}.")


def _validate_conservation(before: LedgerState, plan: PhasePlan) -> None:
    deltas = {address: 0 for address in before.addresses}
    for record in plan.records:
        tx = record.transaction
        deltas[record.originator] -= tx.value + tx.fee
        if not tx.data and tx.to_address in deltas:
            deltas[tx.to_address] += tx.value

    for account in before.accounts:
        after = plan.ledger.get(account.address)
        if after.balance - account.balance != deltas[account.address]:
            raise PlanValidationError(f"Balance is not conserved for {account.address}.")
        if after.balance < 0:
            raise PlanValidationError(f"Plan overdraws {account.address}.")
