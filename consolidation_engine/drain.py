"""Balance drain: send what is left of each native balance to the destination."""

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from .models import TRANSFER_GAS, AccountState, LedgerState, Phase, PhasePlan, SignedTransactionRecord
from .transactions import Signer, sign_for
from .validation import validate_phase

logger = logging.getLogger(__name__)

DEFAULT_GAS_PRICE_STEP = 1_000_000


def plan_balance_drain(
    ledger: LedgerState,
    gas_price: int,
    destination: str,
    signer: Signer,
    gas_price_step: int = DEFAULT_GAS_PRICE_STEP,
) -> PhasePlan:
    if gas_price_step <= 0:
        raise ValueError("gas_price_step must be positive.")

    before = ledger
    records: List[SignedTransactionRecord] = []
    dust: List[str] = []

    for account in before.accounts:
        quote = drain_quote(account.balance, gas_price, gas_price_step)
        if quote is None:
            if account.balance > 0:
                logger.info("Leaving dust of %d wei on %s", account.balance, account.address)
                dust.append(account.address)
            continue
        price, amount = quote
        if price != gas_price:
            logger.info(
                "Lowered gas price for %s from %d to %d wei to drain dust",
                account.address,
                gas_price,
                price,
            )
        record = sign_for(
            signer,
            Phase.BALANCE_DRAIN,
            account,
            to_address=destination,
            value=amount,
            gas_limit=TRANSFER_GAS,
            gas_price=price,
        )
        records.append(record)
        ledger = ledger.replace(_drained(account, destination, amount, price))

    plan = PhasePlan(
        phase=Phase.BALANCE_DRAIN,
        ledger=ledger,
        records=tuple(records),
        unresolved=tuple(dust),
    )
    validate_phase(before, plan)
    return plan


def drain_quote(balance: int, gas_price: int, gas_price_step: int) -> Optional[Tuple[int, int]]:
    """Return ``(gas_price, amount)`` for the highest price that leaves something to send.

    ``amount + gas_price * TRANSFER_GAS == balance`` for any returned quote.
    """
    price = gas_price
    while price > 0:
        amount = balance - price * TRANSFER_GAS
        if amount > 0:
            return price, amount
        price = max(price - gas_price_step, 0)
    return None


def _drained(account: AccountState, destination: str, amount: int, price: int) -> AccountState:
    balance = account.balance - amount - price * TRANSFER_GAS
    if account.address == destination:
        balance += amount
    return replace(account, balance=balance, nonce=account.nonce + 1)
