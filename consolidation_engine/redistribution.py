"""Gas redistribution: fund accounts that cannot pay for their own token sweep.

Accounts split into deficit accounts (``balance < gas_price * total_gas_budget``)
and surplus accounts (everything else). The least deficient account is served
first, by the richest surplus account. After every emitted transfer the
matching starts over on the updated ledger. Each step either lifts a deficit account out of
deficit for good or leaves a surplus account with exactly zero available, so
a ledger of ``n`` accounts needs at most ``2 * n`` steps.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from .models import TRANSFER_GAS, AccountState, LedgerState, Phase, PhasePlan, SignedTransactionRecord
from .transactions import Signer, sign_for
from .validation import PlanValidationError, validate_phase

logger = logging.getLogger(__name__)


def plan_gas_redistribution(ledger: LedgerState, gas_price: int, signer: Signer) -> PhasePlan:
    before = ledger
    records: List[SignedTransactionRecord] = []
    fee = gas_price * TRANSFER_GAS
    max_steps = 2 * len(ledger.accounts)

    while True:
        match = _next_transfer(ledger, gas_price)
        if match is None:
            break
        if len(records) >= max_steps:
            raise PlanValidationError("Gas redistribution did not converge.")

        sender, receiver, amount = match
        record = sign_for(
            signer,
            Phase.GAS_REDISTRIBUTION,
            sender,
            to_address=receiver.address,
            value=amount,
            gas_limit=TRANSFER_GAS,
            gas_price=gas_price,
        )
        ledger = ledger.replace(
            replace(sender, balance=sender.balance - amount - fee, nonce=sender.nonce + 1)
        )
        ledger = ledger.replace(replace(receiver, balance=receiver.balance + amount))
        records.append(record)
        logger.info(
            "Planned gas transfer of %d wei from %s to %s (nonce %d)",
            amount,
            sender.address,
            receiver.address,
            record.transaction.nonce,
        )

    underfunded = tuple(account.address for account in _deficits(ledger, gas_price))
    for address in underfunded:
        logger.warning(
            "%s remains under-funded; it will sweep only the tokens it can afford", address
        )

    plan = PhasePlan(
        phase=Phase.GAS_REDISTRIBUTION,
        ledger=ledger,
        records=tuple(records),
        unresolved=underfunded,
    )
    validate_phase(before, plan)
    return plan


def _next_transfer(
    ledger: LedgerState, gas_price: int
) -> Optional[Tuple[AccountState, AccountState, int]]:
    fee = gas_price * TRANSFER_GAS
    deficits = _deficits(ledger, gas_price)
    surpluses = _surpluses(ledger, gas_price)

    for deficit in deficits:
        need = deficit.required_gas(gas_price)
        for surplus in surpluses:
            available = surplus.available(gas_price)
            if available >= need + fee:
                amount = need
            else:
                amount = available - fee
            if amount > 0:
                return surplus, deficit, amount
    return None


def _deficits(ledger: LedgerState, gas_price: int) -> Tuple[AccountState, ...]:
    """Least deficient first (highest ``available``), then by address.

    This order is intentional; do not switch it to most deficient first.
    """
    deficits = [
        account for account in ledger.accounts if account.available(gas_price) < 0
    ]
    return tuple(sorted(deficits, key=lambda account: (-account.available(gas_price), account.address)))


def _surpluses(ledger: LedgerState, gas_price: int) -> Tuple[AccountState, ...]:
    surpluses = [
        account for account in ledger.accounts if account.available(gas_price) >= 0
    ]
    return tuple(sorted(surpluses, key=lambda account: (-account.available(gas_price), account.address)))
