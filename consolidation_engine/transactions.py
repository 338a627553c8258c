"""Transaction construction shared by the planners."""

from typing import Protocol

from .models import (
    AccountState,
    KeyHandle,
    Phase,
    SignedTransaction,
    SignedTransactionRecord,
    UnsignedTransaction,
)
from .validation import PlanValidationError


class Signer(Protocol):
    def sign(self, transaction: UnsignedTransaction, key: KeyHandle) -> SignedTransaction:
        ...


def sign_for(
    signer: Signer,
    phase: Phase,
    account: AccountState,
    to_address: str,
    value: int,
    gas_limit: int,
    gas_price: int,
    data: bytes = b"",
) -> SignedTransactionRecord:
    """Sign a transaction at the account's current nonce."""
    if account.chain_id is None:
        raise PlanValidationError(f"Chain id is not set for {account.address}.")
    transaction = UnsignedTransaction(
        to_address=to_address,
        value=value,
        gas_limit=gas_limit,
        gas_price=gas_price,
        nonce=account.nonce,
        data=data,
        chain_id=account.chain_id,
    )
    signed = signer.sign(transaction, account.key)
    return SignedTransactionRecord(originator=account.address, phase=phase, signed=signed)
